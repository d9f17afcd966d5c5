"""Build-time configuration for dwmstatus.

Everything here is a constant; edit and reinstall to change behaviour.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class Icons:
    """Glyphs shown in front of each value (Font Awesome / Nerd Font)."""

    date: str = ""
    time: str = ""
    time_with_space: str = " "
    wifi: str = ""
    memory: str = ""
    cpu: str = ""
    disk: str = ""
    speaker_unmuted: str = ""
    speaker_muted: str = ""


@dataclass(frozen=True)
class BatteryIcons:
    """One glyph per battery tier."""

    full: str = ""
    three_quarters: str = ""
    half: str = ""
    quarter: str = ""
    empty: str = ""


@dataclass(frozen=True)
class SourcePaths:
    """Kernel text interfaces polled every cycle."""

    stat: Path = Path("/proc/stat")
    wireless: Path = Path("/proc/net/wireless")
    # (energy_now, energy_full) per battery unit
    batteries: tuple[tuple[Path, Path], ...] = (
        (
            Path("/sys/class/power_supply/BAT0/energy_now"),
            Path("/sys/class/power_supply/BAT0/energy_full"),
        ),
        (
            Path("/sys/class/power_supply/BAT1/energy_now"),
            Path("/sys/class/power_supply/BAT1/energy_full"),
        ),
    )


ICONS = Icons()
BATTERY_ICONS = BatteryIcons()
PATHS = SourcePaths()

SLEEP_INTERVAL = 1.0  # seconds
DATE_FORMAT = "%a %d %b"
TIME_FORMAT = "%l:%M"  # space-padded hour

MAX_STATUS_BYTES = 511
MAX_SONG_LENGTH = 63
GIGABYTE = 1024**3
WIFI_QUALITY_MAX = 70

MIXER_CONTROL = "Master"
MIXER_DEVICE = "default"

PLAYER_FORMAT = "{{artist}} - {{title}}"
PLAYER_TIMEOUT = 1.0  # seconds

SHOW_DISK = False
DISK_MOUNTPOINT = "/"

LOG_LEVEL = logging.WARNING
LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"
