# io/recorder.py
import json
import sys
from dataclasses import asdict
from typing import Protocol


class Sink(Protocol):
    def write(self, entry) -> None: ...


class JsonlSink:
    def __init__(self, fp=sys.stdout):
        self.fp = fp

    def write(self, entry) -> None:
        payload = {"kind": type(entry).__name__, **asdict(entry)}
        self.fp.write(json.dumps(payload, default=str) + "\n")


class MemorySink:
    def __init__(self):
        self.entries: list = []

    def write(self, entry) -> None:
        self.entries.append(entry)


class Recorder:
    def __init__(self, *sinks: Sink):
        self.sinks = sinks or (MemorySink(),)
        self.dropped = 0

    def emit(self, entry):
        for s in self.sinks:
            try:
                s.write(entry)
            except Exception:
                self.dropped += 1  # a broken sink never breaks the run
