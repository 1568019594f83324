# sources/json_file.py
import copy
import json
import os
from pathlib import Path

from subcatch_pop.sources.memory import InMemoryPolygonSource


class JsonPolygonSource(InMemoryPolygonSource):
    """
    Network model stored as a JSON document::

        {"subcatchments": [
            {"id": "S1", "boundary": [x0, y0, x1, y1, ...], "selected": true,
             "fields": {"Population": 12.5}}
        ]}

    Committed writes are persisted back to the same file (replace-on-write).
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        doc = json.loads(self.path.read_text(encoding="utf-8-sig"))
        units = doc.get("subcatchments", [])
        super().__init__(
            {str(u["id"]): u.get("boundary") for u in units},
            selected=[str(u["id"]) for u in units if u.get("selected", True)],
            fields={str(u["id"]): u.get("fields", {}) for u in units},
        )
        self._doc = doc

    def _apply(self, staged: dict[str, dict[str, float]]) -> None:
        # file first; memory only changes once the document is on disk
        doc = copy.deepcopy(self._doc)
        for u in doc.get("subcatchments", []):
            if str(u["id"]) in staged:
                u.setdefault("fields", {}).update(staged[str(u["id"])])
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(doc, indent=2), encoding="utf-8")
        os.replace(tmp, self.path)
        self._doc = doc
        super()._apply(staged)
