import os
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _expand(v: str) -> str:
    return os.path.expandvars(os.path.expanduser(v))


class LogModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    debug: bool = False
    sample_every: int = Field(default=1000, ge=1)


class InputModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    points_csv: str
    # first present column wins, in this order
    wkt_columns: tuple[str, ...] = ("WKT", "wkt", "geometry")
    weight_columns: tuple[str, ...] = ("oc", "OC")

    @field_validator("points_csv")
    @classmethod
    def _expand_path(cls, v: str) -> str:
        return _expand(v)

    @field_validator("wkt_columns", "weight_columns")
    @classmethod
    def _non_empty(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        if not v:
            raise ValueError("at least one column name is required")
        return v


class OutputModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    overlap_filename: str = "overlapping_subcatchments.txt"  # written next to the points CSV
    population_field: str = "Population"
    decimals: int = Field(default=2, ge=0)
    diagnostics_jsonl: str | None = None
    verbose_report: bool = False

    @field_validator("diagnostics_jsonl")
    @classmethod
    def _expand_path(cls, v: str | None) -> str | None:
        return _expand(v) if v else None


# ----------------- POLYGON SOURCES ---------------------


class JsonSourceModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    kind: Literal["json"] = "json"
    file: str
    must_exist: bool = True

    @field_validator("file")
    @classmethod
    def _expand_path(cls, v: str) -> str:
        return _expand(v)


class SubcatchmentModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    id: str
    boundary: list[float] | None = None  # flat [x0, y0, x1, y1, ...]
    selected: bool = True


class InlineSourceModel(BaseModel):
    """Subcatchments given directly in the config; handy for tests and small runs."""

    model_config = ConfigDict(extra="forbid")
    kind: Literal["inline"] = "inline"
    subcatchments: list[SubcatchmentModel] = Field(default_factory=list)


SourceUnion = Annotated[JsonSourceModel | InlineSourceModel, Field(discriminator="kind")]


# ------------------------------------------------------------------


class RunModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    name: str
    run_id: str = "local"
    input: InputModel
    output: OutputModel = OutputModel()
    source: SourceUnion | None = None  # None when the caller injects a PolygonSource
    log: LogModel = LogModel()
