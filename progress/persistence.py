# progress/persistence.py
from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Callable

from .exceptions import PersistenceFailure

LOGGER = logging.getLogger(__name__)


class JsonDocument:
    """One JSON file holding the full serialized state of a store."""

    def __init__(self, path: str | Path, default: Callable[[], Any]) -> None:
        self.path = Path(path)
        self._default = default

    def load(self) -> Any:
        """
        Read the document.

        A missing or unreadable document is not fatal: the caller gets the
        empty default and a warning is logged.
        """
        if not self.path.exists():
            LOGGER.info("%s not found, starting empty", self.path)
            return self._default()
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            LOGGER.warning("Failed to load %s, starting empty: %s", self.path, e)
            return self._default()

    def save(self, data: Any) -> None:
        """Write to a temp file in the same directory, then rename over the document."""
        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self.path.parent,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                delete=False,
            ) as f:
                tmp_name = f.name
                json.dump(data, f, ensure_ascii=False, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.path)
        except (OSError, TypeError, ValueError) as e:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise PersistenceFailure(self.path, e) from e
