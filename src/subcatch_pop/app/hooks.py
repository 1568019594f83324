# app/hooks.py
from typing import Protocol


class RunHooks(Protocol):
    def run_start(self, *, points_csv, selected): ...
    def points_loaded(self, *, count, rejected): ...
    def polygons_loaded(self, *, valid, selected): ...
    def outcome(self, index: int, outcome): ...
    def diagnostic(self, entry): ...
    def committed(self, *, updated): ...
    def rolled_back(self, *, reason: str): ...
    def run_end(self, **counts): ...
    def error(self, exc: BaseException, **kw): ...


class NoopHooks:
    def run_start(self, **_):
        pass

    def points_loaded(self, **_):
        pass

    def polygons_loaded(self, **_):
        pass

    def outcome(self, *_, **__):
        pass

    def diagnostic(self, *_, **__):
        pass

    def committed(self, **_):
        pass

    def rolled_back(self, **_):
        pass

    def run_end(self, **_):
        pass

    def error(self, *_, **__):
        pass
