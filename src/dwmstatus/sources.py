"""Readers for the host interfaces dwmstatus polls.

Every reader either returns a value or raises a ``MetricError`` subclass:
``SourceUnavailable`` when the file, call or command cannot be reached and
``MalformedData`` when it answers with something that cannot be parsed.
Deciding what a failure means for the status line is left to the gauges.
"""

import logging
import subprocess
from pathlib import Path

import psutil

from dwmstatus import config
from dwmstatus.models import CpuTicks, MixerReading

logger = logging.getLogger(__name__)


class MetricError(Exception):
    """Base class for failures while reading a metric source."""


class SourceUnavailable(MetricError):
    """The source could not be opened or queried."""


class MalformedData(MetricError):
    """The source answered but its content could not be parsed."""


def read_text(path: Path) -> str:
    """Read a whole text file, closing it before returning."""
    try:
        return Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise SourceUnavailable(f"cannot read {path}: {exc}") from exc
    except UnicodeDecodeError as exc:
        raise MalformedData(f"{path} is not valid text: {exc}") from exc


def read_number(path: Path) -> float:
    """Read the leading number of a single-value sysfs/proc file."""
    text = read_text(path)
    fields = text.split()
    if not fields:
        raise MalformedData(f"{path} is empty")
    try:
        return float(fields[0])
    except ValueError as exc:
        raise MalformedData(f"{path} does not start with a number: {fields[0]!r}") from exc


def read_cpu_ticks(path: Path = config.PATHS.stat) -> CpuTicks:
    """
    Read the aggregate ``cpu`` line of /proc/stat.

    Only the first seven counters are used; newer kernels append steal and
    guest columns which are ignored.
    """
    text = read_text(path)
    lines = text.splitlines()
    fields = lines[0].split() if lines else []
    if len(fields) < 8 or fields[0] != "cpu":
        raise MalformedData(f"unexpected first line in {path}")
    try:
        return CpuTicks(*(int(value) for value in fields[1:8]))
    except ValueError as exc:
        raise MalformedData(f"non-numeric tick counter in {path}") from exc


def read_wireless(path: Path = config.PATHS.wireless) -> str:
    """Return the raw /proc/net/wireless table."""
    return read_text(path)


def read_memory() -> tuple[int, int]:
    """Return ``(used, total)`` memory in bytes, with used = total - free."""
    try:
        mem = psutil.virtual_memory()
    except (OSError, psutil.Error) as exc:
        raise SourceUnavailable(f"cannot query memory: {exc}") from exc
    return mem.total - mem.free, mem.total


def read_disk(mountpoint: str = config.DISK_MOUNTPOINT) -> tuple[int, int]:
    """Return ``(used, total)`` bytes for the filesystem at ``mountpoint``."""
    try:
        usage = psutil.disk_usage(mountpoint)
    except (OSError, psutil.Error) as exc:
        raise SourceUnavailable(f"cannot stat {mountpoint}: {exc}") from exc
    return usage.total - usage.free, usage.total


def read_now_playing(
    fmt: str = config.PLAYER_FORMAT,
    timeout: float = config.PLAYER_TIMEOUT,
) -> str:
    """
    Ask playerctl what the active media player is playing.

    Raises SourceUnavailable when playerctl is missing, times out or reports
    that no player is running.
    """
    try:
        result = subprocess.run(
            ["playerctl", "metadata", "--format", fmt],
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
            check=False,
        )
    except (OSError, subprocess.TimeoutExpired) as exc:
        raise SourceUnavailable(f"playerctl failed: {exc}") from exc

    if result.returncode != 0:
        raise SourceUnavailable(f"playerctl exited with {result.returncode}")
    return result.stdout.strip()


def query_mixer(
    control: str = config.MIXER_CONTROL,
    device: str = config.MIXER_DEVICE,
) -> MixerReading:
    """
    Query the playback volume range, raw volume and switch of a mixer control.

    The mixer handle is opened and closed on every call.
    """
    import alsaaudio  # deferred: needs libasound at import time

    try:
        mixer = alsaaudio.Mixer(control=control, device=device)
    except alsaaudio.ALSAAudioError as exc:
        raise SourceUnavailable(f"cannot open mixer {device}/{control}: {exc}") from exc

    try:
        low, high = mixer.getrange(units=alsaaudio.VOLUME_UNITS_RAW)
        volume = mixer.getvolume(units=alsaaudio.VOLUME_UNITS_RAW)[0]
        try:
            muted = bool(mixer.getmute()[0])
        except alsaaudio.ALSAAudioError:
            # Control has no playback switch
            muted = False
    except (alsaaudio.ALSAAudioError, IndexError) as exc:
        raise MalformedData(f"cannot read mixer {device}/{control}: {exc}") from exc
    finally:
        mixer.close()

    return MixerReading(min=low, max=high, volume=volume, playback_active=not muted)
