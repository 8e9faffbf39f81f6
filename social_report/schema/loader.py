"""Settings loader: YAML serialization and deserialization for ReportSettings.

Agency branding, the design palette and runtime knobs (asset timeout, slide
size) live in a human-readable YAML file so they can be reviewed and edited
without touching code. A missing key falls back to the built-in default.
"""

import logging
from pathlib import Path

import yaml

from .models import ReportSettings

logger = logging.getLogger(__name__)


def save_settings(settings: ReportSettings, path: str | Path) -> None:
    """Serialize ReportSettings to a YAML file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = settings.to_dict()
    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False,
                  allow_unicode=True, width=120)


def load_settings(path: str | Path | None = None) -> ReportSettings:
    """Deserialize ReportSettings from a YAML file.

    ``None`` returns the defaults. An empty file is treated the same way.
    """
    if path is None:
        return ReportSettings()
    path = Path(path)
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if not data:
        logger.warning("Settings file %s is empty, using defaults", path)
        return ReportSettings()
    if not isinstance(data, dict):
        raise ValueError(f"Settings file {path} must contain a mapping, "
                         f"got {type(data).__name__}")
    return ReportSettings.from_dict(data)
