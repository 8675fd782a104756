"""
Event stack chart configuration (dataclass + platformdirs JSON file).

Persisted items (schema v1):
- period overflow tolerances (hours for a day, days for a year)
- default palette name, color method, marker, line width, marker size, theme

Behavior:
- If the config file is missing or unreadable -> defaults are used
- If schema_version mismatches:
  - default: reset to defaults
  - optional: keep loaded values but update the version
- Unknown keys in loaded JSON are ignored with warnings
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

import pandas as pd
from platformdirs import user_config_dir

from eventstack.event_stack_chart.chart_types import MARKERS, ColorMethod
from eventstack.event_stack_chart.color_mapper import DEFAULT_PALETTE_NAME
from eventstack.utils.logging import get_logger

logger = get_logger(__name__)

# Increment when you make a breaking change to the on-disk JSON schema.
SCHEMA_VERSION: int = 1


@dataclass
class EventStackConfig:
    """Engine and styling defaults.

    The tolerances allow a day period to hold a 25 hour event (daylight
    saving) and a year period to hold a 366 day event (leap year).
    """

    day_tolerance_hours: float = 25.0
    year_tolerance_days: float = 366.0
    palette: str = DEFAULT_PALETTE_NAME
    color_method: str = ColorMethod.COLORMAPPED.value
    marker: str = "none"
    line_width: float = 1.5
    marker_size: int = 4
    theme: str = "light"

    @property
    def day_tolerance(self) -> pd.Timedelta:
        return pd.Timedelta(hours=self.day_tolerance_hours)

    @property
    def year_tolerance(self) -> pd.Timedelta:
        return pd.Timedelta(days=self.year_tolerance_days)

    def to_json_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_json_dict(cls, d: Dict[str, Any]) -> "EventStackConfig":
        """
        Tolerant loader:
        - ignores unknown keys (with a warning)
        - keeps defaults for missing or invalid values
        """
        defaults = cls()
        kwargs: Dict[str, Any] = {}
        for f in fields(cls):
            if f.name not in d:
                continue
            default_value = getattr(defaults, f.name)
            try:
                kwargs[f.name] = type(default_value)(d[f.name])
            except (TypeError, ValueError):
                logger.warning(f"Invalid value {d[f.name]!r} for '{f.name}' in event stack config, using default")

        if kwargs.get("marker", defaults.marker) not in MARKERS:
            logger.warning(f"Unknown marker {kwargs['marker']!r} in event stack config, using default")
            kwargs.pop("marker")
        if kwargs.get("color_method", defaults.color_method) not in {m.value for m in ColorMethod}:
            logger.warning(f"Unknown color_method {kwargs['color_method']!r} in event stack config, using default")
            kwargs.pop("color_method")

        known_keys = {f.name for f in fields(cls)} | {"schema_version"}
        for key in d.keys():
            if key not in known_keys:
                logger.warning(f"Unknown key '{key}' in event stack config, ignoring")

        return cls(**kwargs)


class EventStackConfigFile:
    """
    Manager for loading/saving EventStackConfig to disk.
    """

    def __init__(self, *, path: Path, data: Optional[EventStackConfig] = None):
        self.path = path
        self.data = data if data is not None else EventStackConfig()

    @staticmethod
    def default_config_path(
        app_name: str = "eventstack",
        filename: str = "event_stack_config.json",
        app_author: str | None = None,
    ) -> Path:
        """
        Determine OS-appropriate per-user config path.

        macOS:   ~/Library/Application Support/eventstack/event_stack_config.json
        Linux:   ~/.config/eventstack/event_stack_config.json
        Windows: %APPDATA%\\eventstack\\event_stack_config.json
        """
        d = Path(user_config_dir(app_name, app_author))
        d.mkdir(parents=True, exist_ok=True)
        return d / filename

    @classmethod
    def load(
        cls,
        *,
        config_path: Optional[Path] = None,
        app_name: str = "eventstack",
        filename: str = "event_stack_config.json",
        app_author: str | None = None,
        schema_version: int = SCHEMA_VERSION,
        reset_on_version_mismatch: bool = True,
        create_if_missing: bool = False,
    ) -> "EventStackConfigFile":
        """
        Load config from disk.

        If the file doesn't exist or is unreadable -> defaults.
        If schema mismatch:
          - reset_on_version_mismatch=True -> defaults
          - else -> keep loaded values

        If create_if_missing=True and the file is missing -> immediately write defaults.
        """
        path = config_path or cls.default_config_path(app_name=app_name, filename=filename, app_author=app_author)

        try:
            raw = path.read_text(encoding="utf-8")
            parsed = json.loads(raw)
        except FileNotFoundError:
            logger.debug(f"Event stack config file not found at {path}, using defaults")
            cfg = cls(path=path)
            if create_if_missing:
                cfg.save()
            return cfg
        except json.JSONDecodeError as e:
            logger.warning(f"Event stack config file at {path} is not valid JSON: {e}, using defaults")
            return cls(path=path)
        except OSError as e:
            logger.warning(f"Error reading event stack config from {path}: {e}, using defaults")
            return cls(path=path)

        if not isinstance(parsed, dict):
            logger.warning(f"Event stack config file at {path} does not contain a dict, using defaults")
            return cls(path=path)

        loaded_version = parsed.get("schema_version", -1)
        if loaded_version != schema_version and reset_on_version_mismatch:
            logger.warning(
                f"Event stack config schema version mismatch: loaded={loaded_version}, "
                f"expected={schema_version}, resetting to defaults"
            )
            return cls(path=path)

        return cls(path=path, data=EventStackConfig.from_json_dict(parsed))

    def save(self) -> None:
        """Write config to disk."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            payload = {"schema_version": SCHEMA_VERSION, **self.data.to_json_dict()}
            self.path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
            logger.info(f"Saved event stack config to {self.path}")
        except Exception as e:
            logger.error(f"Error saving event stack config to {self.path}: {e}")
            raise
