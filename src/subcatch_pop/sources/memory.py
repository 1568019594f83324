# sources/memory.py
from collections.abc import Iterable, Mapping, Sequence


class InMemoryPolygonSource:
    """
    Dict-backed network model. Writes are staged inside a transaction and only
    become visible in ``fields`` on commit; rollback discards them.

    A boundary given as an exception instance is raised when read, which is
    how tests simulate a faulty geometry lookup.
    """

    def __init__(
        self,
        boundaries: Mapping[str, Sequence[float] | BaseException | None],
        *,
        selected: Iterable[str] | None = None,
        fields: Mapping[str, Mapping[str, float]] | None = None,
    ):
        self.boundaries = dict(boundaries)
        self.selected = list(self.boundaries if selected is None else selected)
        self.fields: dict[str, dict[str, float]] = {k: dict(v) for k, v in (fields or {}).items()}
        self._staged: dict[str, dict[str, float]] | None = None
        self.calls: list[str] = []  # transaction verbs, in call order

    @property
    def in_transaction(self) -> bool:
        return self._staged is not None

    def selected_ids(self) -> list[str]:
        return list(self.selected)

    def boundary(self, unit_id: str):
        b = self.boundaries.get(unit_id)
        if isinstance(b, BaseException):
            raise b
        return b

    def write_field(self, unit_id: str, field: str, value: float) -> None:
        if self._staged is None:
            raise RuntimeError("write_field called outside a transaction")
        if unit_id not in self.boundaries:
            raise KeyError(f"unknown subcatchment {unit_id!r}")
        self._staged.setdefault(unit_id, {})[field] = value

    def transaction_begin(self) -> None:
        if self._staged is not None:
            raise RuntimeError("transaction already open")
        self.calls.append("begin")
        self._staged = {}

    def transaction_commit(self) -> None:
        if self._staged is None:
            raise RuntimeError("no open transaction")
        self.calls.append("commit")
        self._apply(self._staged)
        self._staged = None

    def transaction_rollback(self) -> None:
        self.calls.append("rollback")
        self._staged = None

    def _apply(self, staged: dict[str, dict[str, float]]) -> None:
        for unit_id, values in staged.items():
            self.fields.setdefault(unit_id, {}).update(values)
