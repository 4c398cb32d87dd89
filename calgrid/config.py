"""
Configuration parser for calgrid.

Handles TOML file parsing for the view layout (time range, pixel scale) and
the localized texts consumed by the date formatter.
"""

import tomllib
import os
import sys
from datetime import datetime
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional

from .timezone_utils import set_timezone


def _debug_print(msg: str) -> None:
    timestamp = datetime.now().strftime("%H:%M:%S")
    print(f"[{timestamp}] CONFIG: {msg}", file=sys.stderr)


@dataclass
class LayoutConfig:
    """Configuration for the time grid of day and week views."""
    time_from: int = 0  # First visible minute of the day
    time_to: int = 24 * 60  # Last visible minute of the day
    time_step: int = 30  # Minutes per time cell
    time_cell_height: int = 40  # Height of a time cell in pixels
    min_event_height: int = 20  # Smallest height an event is drawn with
    overlaps_per_time_step: bool = False  # Only overlap events starting in the same time cell
    show_time: bool = True  # Include the time of day in formatted event dates
    week_starts_on_sunday: bool = False


@dataclass
class LocalizationConfig:
    """Configuration for localized day and month names."""
    timezone: str = "UTC"
    # Full weekday names, Monday first
    weekday_names: list[str] = None
    # Full month names, January first
    month_names: list[str] = None
    # Genitive month names (Greek, Russian...), falls back to month_names
    month_names_genitive: list[str] = None
    am: str = "am"
    pm: str = "pm"

    def __post_init__(self):
        if self.weekday_names is None:
            self.weekday_names = [
                "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"
            ]
        if self.month_names is None:
            self.month_names = [
                "January", "February", "March", "April", "May", "June",
                "July", "August", "September", "October", "November", "December"
            ]

    def get_day_name(self, weekday: int) -> str:
        """Get localized day name for weekday (0=Monday, 6=Sunday)."""
        return self.weekday_names[weekday] if 0 <= weekday < len(self.weekday_names) else ""

    def get_month_name(self, month: int, genitive: bool = False) -> str:
        """Get localized month name (1=January, 12=December)."""
        names = (self.month_names_genitive or self.month_names) if genitive else self.month_names
        return names[month - 1] if 1 <= month <= len(names) else ""


@dataclass
class Config:
    """Main configuration container for calgrid."""

    layout: LayoutConfig = field(default_factory=LayoutConfig)
    localization: LocalizationConfig = field(default_factory=LocalizationConfig)

    @classmethod
    def get_default_config_path(cls) -> Path:
        """Get the default configuration file path."""
        xdg_config = os.environ.get('XDG_CONFIG_HOME', os.path.expanduser('~/.config'))
        return Path(xdg_config) / 'calgrid' / 'calgrid.toml'

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> 'Config':
        """Load configuration from TOML file."""
        if config_path is None:
            config_path = cls.get_default_config_path()

        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, 'rb') as f:
            data = tomllib.load(f)
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict) -> 'Config':
        """Build a configuration from already parsed TOML tables."""
        _debug_print(f"TOML data keys: {list(data.keys())}")

        # Parse Layout section
        layout_data = data.get('Layout', {})
        layout = LayoutConfig(
            time_from=layout_data.get('time_from', LayoutConfig.time_from),
            time_to=layout_data.get('time_to', LayoutConfig.time_to),
            time_step=layout_data.get('time_step', LayoutConfig.time_step),
            time_cell_height=layout_data.get('time_cell_height', LayoutConfig.time_cell_height),
            min_event_height=layout_data.get('min_event_height', LayoutConfig.min_event_height),
            overlaps_per_time_step=layout_data.get('overlaps_per_time_step', LayoutConfig.overlaps_per_time_step),
            show_time=layout_data.get('show_time', LayoutConfig.show_time),
            week_starts_on_sunday=layout_data.get('week_starts_on_sunday', LayoutConfig.week_starts_on_sunday),
        )
        if layout.time_to <= layout.time_from:
            _debug_print(f"Ignoring empty time range {layout.time_from}-{layout.time_to}")
            layout.time_from, layout.time_to = LayoutConfig.time_from, LayoutConfig.time_to

        # Parse Localization section
        localization_data = data.get('Localization', {})

        # Parse space-separated names (if provided)
        def _names(key: str) -> Optional[list[str]]:
            value = localization_data.get(key, '')
            return value.split() if value else None

        localization = LocalizationConfig(
            timezone=localization_data.get('timezone', LocalizationConfig.timezone),
            weekday_names=_names('weekday_names'),
            month_names=_names('month_names'),
            month_names_genitive=_names('month_names_genitive'),
            am=localization_data.get('am', LocalizationConfig.am),
            pm=localization_data.get('pm', LocalizationConfig.pm),
        )
        set_timezone(localization.timezone)

        return cls(layout=layout, localization=localization)
