# backend/windowquote/config.py
from __future__ import annotations

import json
import logging
from pathlib import Path
from threading import Lock
from typing import Dict, Tuple

from .domain.models import Settings

log = logging.getLogger("WindowQuote.config")


class SettingsManager:
    """Filesystem-backed settings storage with validation helpers."""

    def __init__(self, storage_path: str | Path | None = None) -> None:
        """Initialise the manager.

        Parameters
        ----------
        storage_path:
            Optional override for where the JSON settings document lives.
            Defaults to ``<repo-root>/settings.json``.
        """

        backend_dir = Path(__file__).resolve().parents[1]
        default_path = backend_dir.parent / "settings.json"
        self._path = Path(storage_path) if storage_path is not None else default_path
        self._cache: Settings | None = None
        self._lock = Lock()

    @property
    def path(self) -> Path:
        return self._path

    def load(self, *, refresh: bool = False) -> Settings:
        """Load settings from disk (or cached copy).

        ``refresh`` forces a re-read which is useful for tests that mutate
        the file directly.
        """

        if self._cache is not None and not refresh:
            return self._cache

        data: Dict[str, object]
        if self.path.exists():
            try:
                data = json.loads(self.path.read_text("utf-8"))
            except Exception as exc:  # pragma: no cover - defensive logging
                log.warning("Failed to read settings from %s: %s", self.path, exc)
                data = {}
        else:
            data = {}

        # Older files stored a boolean toggle instead of the policy name.
        legacy = data.pop("CLAMP_GRID_OVERFLOW", None)
        if isinstance(legacy, bool) and "GRID_OVERFLOW_POLICY" not in data:
            data["GRID_OVERFLOW_POLICY"] = "clamp" if legacy else "reject"

        try:
            settings = Settings(**data)
        except ValueError as exc:
            log.warning("Invalid settings in %s, using defaults: %s", self.path, exc)
            settings = Settings()
        self._cache = settings
        return settings

    def save(self, settings: Settings) -> Settings:
        """Persist *settings* to disk after validation/sanitisation."""

        settings = self.sanitize(settings)
        ok, errors = self.validate(settings)
        if not ok:
            raise ValueError(f"Invalid settings: {errors}")

        serialised = settings.model_dump()
        with self._lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(serialised, indent=2), encoding="utf-8")
            self._cache = settings
        log.debug("Settings saved to %s", self.path)
        return settings

    @staticmethod
    def validate(s: Settings) -> Tuple[bool, Dict[str, str]]:
        """
        Validate settings that the model alone cannot check.

        Rules:
          - OUTPUT_DIR: must be creatable if it does not exist.
          - DEFAULT_MARKUP_PERCENT: only meaningful with cost-based inventory
            pricing; values above 1000% are rejected as likely typos.
        """
        errors: Dict[str, str] = {}

        out = Path(s.OUTPUT_DIR or "outputs")
        try:
            out.mkdir(parents=True, exist_ok=True)
        except Exception as e:
            errors["OUTPUT_DIR"] = f"Cannot create OUTPUT_DIR '{out}': {e}"

        if s.DEFAULT_MARKUP_PERCENT > 1000:
            errors["DEFAULT_MARKUP_PERCENT"] = "Markup above 1000% is not allowed."

        ok = len(errors) == 0
        if not ok:
            log.warning("Settings validation failed: %s", errors)
        else:
            log.debug("Settings validation OK. OUTPUT_DIR=%s", out.resolve())
        return ok, errors

    @staticmethod
    def sanitize(s: Settings) -> Settings:
        """Re-validate through the model so persisted copies pick up new defaults."""
        return Settings.model_validate(s.model_dump())
