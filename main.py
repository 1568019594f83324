# main.py
import json
import sys

from subcatch_pop.app.diagnostics import FatalError
from subcatch_pop.app.run import run_population
from subcatch_pop.config.models import RunModel


def run(config_path: str) -> int:
    with open(config_path, encoding="utf-8") as f:
        cfg = RunModel.model_validate(json.load(f))

    # Source, points file and output locations all come from the config
    try:
        run_population(cfg)
    except FatalError:
        return 1
    return 0


if __name__ == "__main__":
    if len(sys.argv) != 2:
        sys.exit("usage: python main.py RUN_CONFIG.json")
    sys.exit(run(sys.argv[1]))
