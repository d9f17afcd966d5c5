"""Sampling and publishing loop for dwmstatus."""

import logging
import signal
import threading
from collections.abc import Callable
from datetime import datetime

from dwmstatus import config
from dwmstatus.display import RootWindowPublisher
from dwmstatus.gauges import (
    BatteryGauge,
    CpuLoadTracker,
    VolumeGauge,
    battery_icon,
    parse_quality,
    round_half_up,
    select_time_icon,
    volume_icon,
)
from dwmstatus.models import MetricFragment, StatusFragments
from dwmstatus.sources import (
    MetricError,
    read_disk,
    read_memory,
    read_now_playing,
    read_wireless,
)

logger = logging.getLogger(__name__)


def format_gigabytes(used: int, total: int) -> str:
    """Format a used/total byte pair as whole gigabytes, e.g. ``3/16G``."""
    used_gb = round_half_up(used / config.GIGABYTE)
    total_gb = round_half_up(total / config.GIGABYTE)
    return f"{used_gb}/{total_gb}G"


def truncate_utf8(text: str, max_bytes: int) -> str:
    """Cut ``text`` to at most ``max_bytes`` UTF-8 bytes without splitting a glyph."""
    encoded = text.encode("utf-8")
    if len(encoded) <= max_bytes:
        return text
    return encoded[:max_bytes].decode("utf-8", errors="ignore")


def compose_status(
    fragments: StatusFragments,
    max_bytes: int = config.MAX_STATUS_BYTES,
) -> str:
    """
    Join all fragments into the line dwm displays.

    Pairs are separated by two spaces and each icon by one space from its
    value, except the clock icon which carries its own spacing.
    """
    pairs = [fragments.cpu, fragments.memory]
    if fragments.disk is not None:
        pairs.append(fragments.disk)
    pairs.extend([fragments.volume, fragments.battery, fragments.date])

    body = "  ".join(f"{pair.icon} {pair.text}" for pair in pairs)
    line = (
        f"{fragments.song} {fragments.wifi} {body}  "
        f"{fragments.time.icon}{fragments.time.text}"
    )
    return truncate_utf8(line, max_bytes)


class StatusAggregator:
    """
    Owns every gauge and produces one set of fragments per call.

    Collaborators are injectable so each source can be replaced in tests;
    the defaults read the local machine.
    """

    def __init__(
        self,
        cpu: CpuLoadTracker | None = None,
        battery: BatteryGauge | None = None,
        volume: VolumeGauge | None = None,
        wifi_reader: Callable[[], str] = read_wireless,
        memory_reader: Callable[[], tuple[int, int]] = read_memory,
        disk_reader: Callable[[], tuple[int, int]] = read_disk,
        song_reader: Callable[[], str] = read_now_playing,
        clock: Callable[[], datetime] = datetime.now,
        show_disk: bool = config.SHOW_DISK,
        icons: config.Icons = config.ICONS,
    ) -> None:
        self.cpu = cpu if cpu is not None else CpuLoadTracker()
        self.battery = battery if battery is not None else BatteryGauge()
        self.volume = volume if volume is not None else VolumeGauge()
        self._wifi_reader = wifi_reader
        self._memory_reader = memory_reader
        self._disk_reader = disk_reader
        self._song_reader = song_reader
        self._clock = clock
        self._show_disk = show_disk
        self._icons = icons

    def sample(self) -> StatusFragments:
        """Read every source once and format its fragment."""
        now = self._clock()
        time_text = now.strftime(config.TIME_FORMAT)

        return StatusFragments(
            song=self._song_fragment(),
            wifi=self._wifi_fragment(),
            cpu=self._cpu_fragment(),
            memory=self._memory_fragment(),
            volume=self._volume_fragment(),
            battery=self._battery_fragment(),
            date=MetricFragment(self._icons.date, now.strftime(config.DATE_FORMAT)),
            time=MetricFragment(select_time_icon(time_text, self._icons), time_text),
            disk=self._disk_fragment() if self._show_disk else None,
        )

    def _song_fragment(self) -> str:
        try:
            song = self._song_reader()
        except MetricError as exc:
            logger.debug("Nothing playing: %s", exc)
            return ""
        return song[: config.MAX_SONG_LENGTH]

    def _wifi_fragment(self) -> str:
        try:
            raw = self._wifi_reader()
        except MetricError as exc:
            logger.debug("Wireless stats unavailable: %s", exc)
            return ""
        quality = parse_quality(raw)
        if quality is None:
            return ""
        return f" {self._icons.wifi} {quality}% "

    def _cpu_fragment(self) -> MetricFragment:
        usage = self.cpu.compute_usage()
        text = "" if usage is None else f"{usage:.1f}%"
        return MetricFragment(self._icons.cpu, text)

    def _memory_fragment(self) -> MetricFragment:
        try:
            used, total = self._memory_reader()
        except MetricError as exc:
            logger.debug("Memory unavailable: %s", exc)
            return MetricFragment(self._icons.memory, "")
        return MetricFragment(self._icons.memory, format_gigabytes(used, total))

    def _disk_fragment(self) -> MetricFragment:
        try:
            used, total = self._disk_reader()
        except MetricError as exc:
            logger.debug("Disk usage unavailable: %s", exc)
            return MetricFragment(self._icons.disk, "")
        return MetricFragment(self._icons.disk, format_gigabytes(used, total))

    def _volume_fragment(self) -> MetricFragment:
        reading = self.volume.gauge()
        if reading is None:
            return MetricFragment()
        return MetricFragment(volume_icon(reading, self._icons), f"{reading.percentage}%")

    def _battery_fragment(self) -> MetricFragment:
        reading = self.battery.gauge()
        return MetricFragment(battery_icon(reading.tier), f"{reading.percentage:.0f}%")


class PublishLoop:
    """
    Sample, compose, publish, sleep; repeat until stopped.

    Everything runs on the calling thread. ``stop()`` is meant to be called
    from a signal handler and cuts the current sleep short.
    """

    def __init__(
        self,
        aggregator: StatusAggregator,
        publish: Callable[[str], None],
        interval: float = config.SLEEP_INTERVAL,
    ) -> None:
        """
        Initialize the PublishLoop.

        Args:
            aggregator: Source of the fragments for each cycle.
            publish: Called with every composed status line.
            interval: Seconds to sleep between cycles.
        """
        self._aggregator = aggregator
        self._publish = publish
        self._interval = interval
        self._stop_event = threading.Event()
        self._cycles = 0

    @property
    def cycles(self) -> int:
        """Number of completed cycles."""
        return self._cycles

    def run_once(self) -> str:
        """Run a single cycle without sleeping and return the published line."""
        status = compose_status(self._aggregator.sample())
        self._publish(status)
        self._cycles += 1
        return status

    def run(self) -> None:
        """Run cycles until ``stop()`` is called."""
        logger.info("Publishing status every %.1fs", self._interval)
        while not self._stop_event.is_set():
            try:
                self.run_once()
            except Exception:
                # Keep the bar alive; next cycle re-reads everything
                logger.exception("Status cycle failed")

            self._stop_event.wait(timeout=self._interval)
        logger.info("Stopped after %d cycles", self._cycles)

    def stop(self) -> None:
        """Ask the loop to exit after the current cycle."""
        self._stop_event.set()


def main() -> None:
    """Entry point for the dwm-status command."""
    logging.basicConfig(level=config.LOG_LEVEL, format=config.LOG_FORMAT)

    publisher = RootWindowPublisher()
    loop = PublishLoop(StatusAggregator(), publisher.publish)

    def _shutdown(signum, frame) -> None:
        logger.info("Received signal %d, shutting down", signum)
        loop.stop()

    signal.signal(signal.SIGTERM, _shutdown)
    signal.signal(signal.SIGINT, _shutdown)

    try:
        loop.run()
    finally:
        publisher.close()


if __name__ == "__main__":
    main()
