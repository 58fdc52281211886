from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Iterable
import json
import threading

from .types import DecodeResult


class JsonlWriter:
    def __init__(self, path: Path) -> None:
        self.path = path
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        self.count = 0

        # Truncate on startup for "fresh run" behavior
        self.path.write_text("", encoding="utf-8")

    def append(self, obj: Dict[str, Any]) -> None:
        line = json.dumps(obj, separators=(",", ":"), ensure_ascii=False)
        with self._lock:
            with self.path.open("a", encoding="utf-8") as f:
                f.write(line + "\n")
            self.count += 1

    def write_result(self, result: DecodeResult, *, buffer_index: int = 0) -> None:
        # One row per sub-message, tagged with the buffer it came from
        for message in result.messages:
            row = message.to_dict()
            row["buffer"] = buffer_index
            self.append(row)
        if result.error is not None:
            self.append({"buffer": buffer_index, "error": str(result.error), "state": result.state.value})

    def write_results(self, results: Iterable[DecodeResult]) -> None:
        for idx, result in enumerate(results):
            self.write_result(result, buffer_index=idx)
