"""Turn raw metric samples into values and icons for the status line."""

import logging
import math
from collections.abc import Callable, Sequence
from pathlib import Path

from dwmstatus import config
from dwmstatus.models import (
    BatteryReading,
    BatteryTier,
    CpuLoadState,
    CpuTicks,
    MixerReading,
    VolumeReading,
)
from dwmstatus.sources import MetricError, query_mixer, read_cpu_ticks, read_number

logger = logging.getLogger(__name__)

# Sentinel an unavailable battery unit contributes to the average
BATTERY_UNAVAILABLE = -1.0


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves going up."""
    return math.floor(value + 0.5)


class CpuLoadTracker:
    """
    Compute aggregate CPU usage from consecutive /proc/stat samples.

    The tracker keeps the counters from its previous successful read and
    reports the share of non-idle ticks elapsed since then. The very first
    call compares against an all-zero state, so it reports usage since boot.
    """

    def __init__(self, reader: Callable[[], CpuTicks] = read_cpu_ticks) -> None:
        self._reader = reader
        self._state = CpuLoadState()
        self._usage: float | None = None

    @property
    def state(self) -> CpuLoadState:
        """Counters carried over from the previous successful read."""
        return self._state

    def compute_usage(self) -> float | None:
        """
        Return CPU usage in percent since the previous call.

        If the counters cannot be read the state is left alone and the last
        computed value (None before the first success) is returned.
        """
        try:
            ticks = self._reader()
        except MetricError as exc:
            logger.debug("Keeping stale CPU usage: %s", exc)
            return self._usage

        curr_total = sum(ticks)
        load_delta = abs(self._state.total - curr_total)
        idle_delta = abs(ticks.idle - self._state.ticks.idle)

        if load_delta == 0:
            self._usage = 0.0
        else:
            self._usage = 100 * (load_delta - idle_delta) / load_delta

        self._state = CpuLoadState(ticks=ticks, total=curr_total)
        return self._usage


def parse_quality(raw_text: str, scale: int = config.WIFI_QUALITY_MAX) -> int | None:
    """
    Extract link quality in percent from a /proc/net/wireless table.

    The first two lines are headers; the third describes the first wireless
    interface, e.g. ``wlan0: 0000   54.  -45.  -256 ...``. The quality is
    the first field containing a decimal point, and the kernel reports it
    on a 0-70 scale. Returns None when no interface line is present or it
    does not have that shape.
    """
    lines = raw_text.splitlines()
    if len(lines) < 3:
        return None

    _, _, stats = lines[2].rpartition(":")
    for field in stats.split():
        if "." not in field:
            continue
        integer_part = field.split(".", 1)[0]
        try:
            raw = int(integer_part)
        except ValueError:
            return None
        return raw * 100 // scale
    return None


class BatteryGauge:
    """Average the charge of every configured battery unit."""

    def __init__(
        self,
        units: Sequence[tuple[Path, Path]] = config.PATHS.batteries,
        reader: Callable[[Path], float] = read_number,
    ) -> None:
        """
        Initialize the BatteryGauge.

        Args:
            units: ``(energy_now, energy_full)`` file pairs, one per battery.
            reader: Callable returning the number stored in a file.
        """
        self._units = tuple(units)
        self._reader = reader

    def unit_percentage(self, energy_now: Path, energy_full: Path) -> float | None:
        """Charge of a single unit in percent, or None if it can't be read."""
        try:
            full = self._reader(energy_full)
            now = self._reader(energy_now)
        except MetricError as exc:
            logger.debug("Battery unit unavailable: %s", exc)
            return None
        if full == 0:
            logger.debug("Battery unit reports zero capacity: %s", energy_full)
            return None
        return now / full * 100

    def gauge(self) -> BatteryReading:
        """Return the averaged charge and its tier."""
        readings = [self.unit_percentage(now, full) for now, full in self._units]
        percentage = average_units(readings)
        return BatteryReading(percentage=percentage, tier=battery_tier(percentage))


def average_units(readings: Sequence[float | None]) -> float:
    """
    Mean of per-unit charges, counting missing units as -1.

    This keeps the output identical to the classic dwm status bar, where a
    laptop with a single battery shows roughly half its real charge.
    """
    if not readings:
        return BATTERY_UNAVAILABLE
    values = [BATTERY_UNAVAILABLE if value is None else value for value in readings]
    return sum(values) / len(values)


def battery_tier(percentage: float) -> BatteryTier:
    """Map a charge percentage onto an icon tier."""
    rounded = round_half_up(percentage)
    if 90 <= rounded <= 100:
        return BatteryTier.FULL
    if 60 <= rounded <= 89:
        return BatteryTier.THREE_QUARTERS
    if 30 <= rounded <= 59:
        return BatteryTier.HALF
    if 10 <= rounded <= 29:
        return BatteryTier.QUARTER
    return BatteryTier.EMPTY


def battery_icon(tier: BatteryTier, icons: config.BatteryIcons = config.BATTERY_ICONS) -> str:
    """Glyph for a battery tier."""
    return {
        BatteryTier.FULL: icons.full,
        BatteryTier.THREE_QUARTERS: icons.three_quarters,
        BatteryTier.HALF: icons.half,
        BatteryTier.QUARTER: icons.quarter,
        BatteryTier.EMPTY: icons.empty,
    }[tier]


class VolumeGauge:
    """Playback volume and mute state of one mixer control."""

    def __init__(self, query: Callable[[], MixerReading] = query_mixer) -> None:
        self._query = query

    def gauge(self) -> VolumeReading | None:
        """
        Return the volume as a percentage of the control's maximum.

        The lower bound of the range is not subtracted, matching what
        amixer-style status bars have always shown.
        """
        try:
            reading = self._query()
        except MetricError as exc:
            logger.debug("Volume unavailable: %s", exc)
            return None
        if reading.max == 0:
            logger.debug("Mixer reports an empty volume range")
            return None
        percentage = round_half_up(reading.volume / reading.max * 100)
        return VolumeReading(percentage=percentage, muted=not reading.playback_active)


def volume_icon(reading: VolumeReading, icons: config.Icons = config.ICONS) -> str:
    """Muted or unmuted speaker glyph."""
    return icons.speaker_muted if reading.muted else icons.speaker_unmuted


def select_time_icon(time_text: str, icons: config.Icons = config.ICONS) -> str:
    """
    Pick the clock glyph so the gap before the first digit never changes.

    ``%l`` pads single-digit hours with a space, which already separates the
    digit from the icon; two-digit hours need the variant with a trailing space.
    """
    if time_text.startswith(" "):
        return icons.time
    return icons.time_with_space
