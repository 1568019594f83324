# subcatch_pop/runtime/source_factory.py
from pathlib import Path

from subcatch_pop.app.protocols import PolygonSource
from subcatch_pop.config.models import InlineSourceModel, JsonSourceModel, SourceUnion
from subcatch_pop.sources.json_file import JsonPolygonSource
from subcatch_pop.sources.memory import InMemoryPolygonSource


def make_polygon_source(cfg: SourceUnion) -> PolygonSource:
    if isinstance(cfg, JsonSourceModel):
        if not Path(cfg.file).is_file():
            if cfg.must_exist:
                raise FileNotFoundError(f"Subcatchment file not found: {cfg.file}")
            return InMemoryPolygonSource({})
        return JsonPolygonSource(cfg.file)
    elif isinstance(cfg, InlineSourceModel):
        return InMemoryPolygonSource(
            {s.id: s.boundary for s in cfg.subcatchments},
            selected=[s.id for s in cfg.subcatchments if s.selected],
        )
    else:
        raise TypeError(cfg)
