"""Global application configuration."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


def _default_data_dir() -> Path:
    """Return the platform-appropriate data directory."""
    if os.name == "nt":
        base = Path(os.environ.get("LOCALAPPDATA", Path.home() / "AppData" / "Local"))
    elif os.uname().sysname == "Darwin":
        base = Path.home() / "Library" / "Application Support"
    else:
        base = Path(os.environ.get("XDG_DATA_HOME", Path.home() / ".local" / "share"))
    return base / "pdf-redact"


class AppConfig(BaseModel):
    """Application-wide settings, loaded once at startup."""

    data_dir: Path = Field(
        default_factory=lambda: Path(os.environ["PDF_REDACT_DATA_DIR"])
        if os.environ.get("PDF_REDACT_DATA_DIR") else _default_data_dir(),
    )

    # Flattening (page rasterization)
    flatten_dpi: int = Field(default=300, ge=72, le=600)
    jpeg_quality: int = Field(default=90, ge=1, le=100)

    # Mask application: points added on every side of a region
    mask_padding: float = Field(default=1.0, ge=0.0)

    # Text location: pages are independent; 0/1 = process sequentially
    page_workers: int = Field(default=0, ge=0)

    log_level: str = "INFO"

    def model_post_init(self, __context: object) -> None:
        self._load_user_settings()

    # ------------------------------------------------------------------
    # Persistence: user-editable settings live in a JSON sidecar
    # ------------------------------------------------------------------

    _PERSISTABLE_KEYS: set[str] = {
        "flatten_dpi", "jpeg_quality", "mask_padding",
        "page_workers", "log_level",
    }

    @property
    def _settings_path(self) -> Path:
        return self.data_dir / "settings.json"

    def _load_user_settings(self) -> None:
        """Read persisted user settings from disk and apply them."""
        path = self._settings_path
        if not path.exists():
            return
        try:
            data = json.loads(path.read_text(encoding="utf-8-sig"))
            for key, value in data.items():
                if key in self._PERSISTABLE_KEYS and hasattr(self, key):
                    setattr(self, key, value)
            logger.info(f"Loaded user settings from {path}")
        except Exception as exc:
            logger.warning(f"Failed to load settings from {path}: {exc}")

    def save_user_settings(self) -> None:
        """Persist current user-editable settings to disk."""
        data = {k: getattr(self, k) for k in self._PERSISTABLE_KEYS if hasattr(self, k)}
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self._settings_path.write_text(
            json.dumps(data, indent=2, default=str),
            encoding="utf-8",
        )
        logger.info(f"Saved user settings to {self._settings_path}")


# Singleton: importable from anywhere
config = AppConfig()
