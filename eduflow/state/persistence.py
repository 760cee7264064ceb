"""Settings persistence to JSON file."""

import json
import logging
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from eduflow.domain.settings import ReportSettings

logger = logging.getLogger(__name__)


class SettingsStore:
    """Persists report settings to a JSON file.

    Example:
        >>> store = SettingsStore()
        >>> settings = store.load()
        >>> settings.service.base_url = "https://savings.example.org"
        >>> store.save(settings)
    """

    DEFAULT_PATH = Path.home() / ".eduflow_reports.json"

    def __init__(self, path: Optional[Path] = None):
        """Initialize settings store.

        Args:
            path: Optional custom path for settings file.
                  Defaults to ~/.eduflow_reports.json
        """
        self._path = path or self.DEFAULT_PATH

    @property
    def path(self) -> Path:
        """Get the settings file path."""
        return self._path

    def exists(self) -> bool:
        """Check if settings file exists."""
        return self._path.exists()

    def load(self) -> ReportSettings:
        """Load settings from file.

        Returns:
            ReportSettings instance. If the file doesn't exist or is invalid,
            returns default settings.
        """
        if self._path.exists():
            try:
                data = json.loads(self._path.read_text(encoding="utf-8"))
                return ReportSettings.model_validate(data)
            except (OSError, ValueError, ValidationError) as e:
                # Corrupted settings fall back to defaults
                logger.warning(f"Could not load settings from {self._path}: {e}")
                return ReportSettings()
        return ReportSettings()

    def save(self, settings: ReportSettings) -> None:
        """Save settings to file.

        Args:
            settings: ReportSettings to save
        """
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(settings.model_dump_json(indent=2), encoding="utf-8")

    def delete(self) -> bool:
        """Delete settings file.

        Returns:
            True if file was deleted, False if it didn't exist
        """
        if self._path.exists():
            self._path.unlink()
            return True
        return False
