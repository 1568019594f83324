from collections.abc import Sequence
from typing import Protocol, runtime_checkable


# ------------- External network model --------------------
@runtime_checkable
class PolygonSource(Protocol):
    """
    Responsibilities:
      • List the polygon units (subcatchments) selected for this run.
      • Read each unit's flat boundary [x0, y0, x1, y1, ...], or None when it has none.
      • Write one numeric field per unit, inside a begin/commit/rollback transaction.
    Reads happen before any write; nothing written is visible until commit.
    """

    def selected_ids(self) -> Sequence[str]: ...
    def boundary(self, unit_id: str) -> Sequence[float] | None: ...
    def write_field(self, unit_id: str, field: str, value: float) -> None: ...
    def transaction_begin(self) -> None: ...
    def transaction_commit(self) -> None: ...
    def transaction_rollback(self) -> None: ...
