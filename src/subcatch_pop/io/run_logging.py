# io/run_logging.py
import json
import logging
import sys
from dataclasses import asdict, is_dataclass

from subcatch_pop.app.hooks import NoopHooks
from subcatch_pop.domain.outcomes import Overlapping, Unique, Unmatched


class JsonLineFormatter(logging.Formatter):
    """One JSON object per record; a dict passed as ``extra={"extra": {...}}`` is merged in."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": round(record.created, 3),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        fields = getattr(record, "extra", None)
        if isinstance(fields, dict):
            payload.update(fields)
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def _default_json_logger(name="subcatch_pop", level="INFO", stream=None):
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger  # already configured by an earlier run
    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(JsonLineFormatter())
    logger.addHandler(handler)
    logger.setLevel(level)
    return logger


class RunLogging(NoopHooks):
    """
    One place to shape and emit structured logs for a population run.
    """

    def __init__(
        self,
        run_id: str = "local",
        level: str = "INFO",
        debug: bool = False,
        sample_every: int = 1000,
        logger: logging.Logger | None = None,
    ):
        self.run_id, self.debug, self.sample_every = run_id, debug, max(1, sample_every)
        self.log = logger or _default_json_logger(level=level)

    # --------------- Helpers -----------------------------

    def _emit(self, level: str, msg: str, **extra):
        self.log.log(getattr(logging, level), msg, extra={"extra": {"run_id": self.run_id, **extra}})

    @staticmethod
    def _shape_outcome(outcome) -> dict:
        base = {"source_id": outcome.point.source_id, "x": outcome.point.x, "y": outcome.point.y}
        if isinstance(outcome, Unique):
            base["polygon_id"] = outcome.polygon_id
        elif isinstance(outcome, Overlapping):
            base["polygon_ids"] = list(outcome.polygon_ids)
        elif isinstance(outcome, Unmatched):
            base["nearest"] = outcome.nearest_polygon_id
            base["distance"] = outcome.distance
        return base

    # --------------------------------------------------------

    def run_start(self, *, points_csv, selected):
        self._emit("INFO", "run_start", points_csv=str(points_csv), selected=selected)

    def points_loaded(self, *, count, rejected):
        self._emit("INFO", "points_loaded", count=count, rejected=rejected)

    def polygons_loaded(self, *, valid, selected):
        self._emit("INFO", "polygons_loaded", valid=valid, selected=selected)

    def outcome(self, index: int, outcome):
        if self.debug and (index % self.sample_every) == 0:
            self._emit("DEBUG", type(outcome).__name__, index=index, **self._shape_outcome(outcome))

    def diagnostic(self, entry):
        data = asdict(entry) if is_dataclass(entry) else {"message": str(entry)}
        self._emit("WARNING", type(entry).__name__, **data)

    def committed(self, *, updated):
        self._emit("INFO", "committed", updated=updated)

    def rolled_back(self, *, reason: str):
        self._emit("ERROR", "rolled_back", reason=reason)

    def run_end(self, **counts):
        self._emit("INFO", "run_end", **counts)

    def error(self, exc: BaseException, **extra):
        self._emit("ERROR", "run_error", error=str(exc), error_type=type(exc).__name__, **extra)
