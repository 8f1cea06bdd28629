# profile.py
"""Key/value settings profile, optionally backed by a hot-reloadable JSON file."""
from __future__ import annotations

import json
import logging
import math
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

log = logging.getLogger(__name__)


class ProfileStore:
    """
    Flat mapping of config paths (``"/scope/GuideAlgorithm/X/..."``) to numbers.

    With ``path=None`` the store lives in memory only. Otherwise every setter
    writes the whole mapping back to disk, and :meth:`maybe_reload` picks up
    edits made to the file while guiding.
    """

    def __init__(self, path: str | Path | None = None) -> None:
        self.path: Optional[Path] = Path(path).expanduser().resolve() if path else None
        self._stamp: Tuple[float, int] = (0.0, -1)  # (mtime, size)
        self.values: Dict[str, Any] = {}

        if self.path is not None:
            log.info("Profile: %s", self.path)
            self._load(initial=True)

    # ------------------------------------------------------------------
    #   Internal helpers
    # ------------------------------------------------------------------
    def _load(self, *, initial: bool = False) -> None:
        try:
            with self.path.open("r", encoding="utf-8") as fp:
                loaded = json.load(fp)
            if not isinstance(loaded, dict):
                raise ValueError(f"top-level JSON value must be an object, got {type(loaded).__name__}")
            self.values = loaded
            self._remember_stamp()
            if not initial:
                log.info("Reloaded profile from %s", self.path)
        except FileNotFoundError:
            if initial:
                log.info("%s not found, starting with defaults", self.path)
            else:
                log.warning("%s was deleted, keeping old values", self.path)
        except (json.JSONDecodeError, ValueError) as exc:
            log.error("Malformed profile %s: %s", self.path, exc)

    def _remember_stamp(self) -> None:
        stat = self.path.stat()
        self._stamp = (stat.st_mtime, stat.st_size)

    def _save(self) -> None:
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8") as fp:
            json.dump(self.values, fp, indent=2, sort_keys=True)
        self._remember_stamp()

    # ------------------------------------------------------------------
    #   Public API
    # ------------------------------------------------------------------
    def maybe_reload(self) -> bool:
        """
        If the backing file changed since the last load or save, reload it
        and return **True**, else return **False**.
        """
        if self.path is None:
            return False
        try:
            stat = self.path.stat()
        except FileNotFoundError:
            return False

        mtime, fsize = self._stamp
        if stat.st_size != fsize or stat.st_mtime != mtime:
            self._load()
            return True
        return False

    def get_double(self, key: str, default: float) -> float:
        value = self.values.get(key, default)
        try:
            number = float(value)
        except (TypeError, ValueError, OverflowError):
            number = math.nan
        if not math.isfinite(number):
            log.warning("Profile value %s=%r is not a finite number, using %s", key, value, default)
            return float(default)
        return number

    def get_int(self, key: str, default: int) -> int:
        value = self.values.get(key, default)
        try:
            return int(value)
        except (TypeError, ValueError, OverflowError):
            log.warning("Profile value %s=%r is not an integer, using %s", key, value, default)
            return int(default)

    def set_double(self, key: str, value: float) -> None:
        self.values[key] = float(value)
        self._save()

    def set_int(self, key: str, value: int) -> None:
        self.values[key] = int(value)
        self._save()

    def __contains__(self, key: str) -> bool:
        return key in self.values
