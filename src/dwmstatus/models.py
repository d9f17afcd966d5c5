"""Data models for dwmstatus."""

from dataclasses import dataclass, field
from enum import Enum
from typing import NamedTuple


class CpuTicks(NamedTuple):
    """Aggregate CPU tick counters from the first line of /proc/stat."""

    user: int = 0
    nice: int = 0
    system: int = 0
    idle: int = 0
    iowait: int = 0
    irq: int = 0
    softirq: int = 0


@dataclass(slots=True)
class CpuLoadState:
    """Counters seen on the previous cycle, carried into the next one."""

    ticks: CpuTicks = field(default_factory=CpuTicks)
    total: int = 0


class BatteryTier(Enum):
    """Discrete battery icon tiers."""

    FULL = "full"
    THREE_QUARTERS = "three-quarters"
    HALF = "half"
    QUARTER = "quarter"
    EMPTY = "empty"


@dataclass(slots=True, frozen=True)
class BatteryReading:
    """Averaged battery charge and the tier picked for it."""

    percentage: float
    tier: BatteryTier


@dataclass(slots=True, frozen=True)
class MixerReading:
    """Raw values returned by a playback mixer query."""

    min: int
    max: int
    volume: int
    playback_active: bool


@dataclass(slots=True, frozen=True)
class VolumeReading:
    """Volume scaled to a percentage plus mute state."""

    percentage: int
    muted: bool


@dataclass(slots=True, frozen=True)
class MetricFragment:
    """Icon and formatted value for one metric."""

    icon: str = ""
    text: str = ""


@dataclass(slots=True, frozen=True)
class StatusFragments:
    """Everything the composer needs for one status line, in output order."""

    song: str
    wifi: str
    cpu: MetricFragment
    memory: MetricFragment
    volume: MetricFragment
    battery: MetricFragment
    date: MetricFragment
    time: MetricFragment
    disk: MetricFragment | None = None
