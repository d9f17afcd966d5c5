"""Tests for the status line preview application."""

import threading
from datetime import datetime

import pytest
from textual.widgets import DataTable

from dwmstatus.app import FragmentTable, StatusLineView, StatusPreviewApp, fragment_rows
from dwmstatus.gauges import BatteryGauge, CpuLoadTracker, VolumeGauge
from dwmstatus.models import CpuTicks, MetricFragment, MixerReading, StatusFragments
from dwmstatus.monitor import StatusAggregator
from dwmstatus.sources import SourceUnavailable


class CountingAggregator(StatusAggregator):
    """Aggregator over fake sources that counts samples."""

    def __init__(self) -> None:
        ticks = iter(CpuTicks(10 * n, 0, 0, 30 * n, 0, 0, 0) for n in range(1, 10_000))

        def no_wifi():
            raise SourceUnavailable("no wireless")

        super().__init__(
            cpu=CpuLoadTracker(reader=lambda: next(ticks)),
            battery=BatteryGauge(units=[("now", "full")], reader={"now": 1.0, "full": 2.0}.__getitem__),
            volume=VolumeGauge(
                query=lambda: MixerReading(min=0, max=100, volume=40, playback_active=True)
            ),
            wifi_reader=no_wifi,
            memory_reader=lambda: (2 * 1024**3, 8 * 1024**3),
            disk_reader=lambda: (0, 0),
            song_reader=lambda: "[Artist] - Title",
            clock=lambda: datetime(2024, 3, 5, 11, 15),
        )
        self.samples = 0

    def sample(self) -> StatusFragments:
        self.samples += 1
        return super().sample()


class GatedAggregator(CountingAggregator):
    """Aggregator whose samples block until the gate is opened."""

    def __init__(self) -> None:
        super().__init__()
        self.gate = threading.Event()

    def sample(self) -> StatusFragments:
        self.gate.wait(timeout=5)
        return super().sample()


async def settle(pilot) -> None:
    """Wait for background samples to finish and their updates to land."""
    await pilot.app.workers.wait_for_complete()
    await pilot.pause()


def test_fragment_rows_order():
    """Test rows follow the status line order and skip the hidden disk."""
    fragments = StatusFragments(
        song="Song",
        wifi=" W 77% ",
        cpu=MetricFragment("C", "1.0%"),
        memory=MetricFragment("M", "1/8G"),
        volume=MetricFragment("V", "40%"),
        battery=MetricFragment("B", "50%"),
        date=MetricFragment("D", "Tue 05 Mar"),
        time=MetricFragment("T ", "11:15"),
    )

    rows = fragment_rows(fragments)

    assert [row[0] for row in rows] == [
        "song",
        "wifi",
        "cpu",
        "memory",
        "volume",
        "battery",
        "date",
        "time",
    ]
    assert rows[1] == ("wifi", "", "W 77%")
    assert rows[-1] == ("time", "T", "11:15")


@pytest.mark.asyncio
async def test_app_creation():
    """Test StatusPreviewApp can be instantiated."""
    app = StatusPreviewApp(aggregator=CountingAggregator())
    assert app.title == "dwm-status"
    assert app.sub_title == "Status line preview"


@pytest.mark.asyncio
async def test_app_compose():
    """Test StatusPreviewApp composes and samples on mount."""
    aggregator = CountingAggregator()
    app = StatusPreviewApp(aggregator=aggregator, interval=60)
    async with app.run_test() as pilot:
        await settle(pilot)
        view = pilot.app.query_one("#status-line", StatusLineView)
        assert aggregator.samples == 1
        # Brackets in the song must not be taken as markup
        assert view.status.startswith("[Artist] - Title")
        assert pilot.app.query_one("#fragment-table") is not None


@pytest.mark.asyncio
async def test_fragment_table_rows():
    """Test the table holds one row per visible metric."""
    app = StatusPreviewApp(aggregator=CountingAggregator(), interval=60)
    async with app.run_test() as pilot:
        await settle(pilot)
        table = pilot.app.query_one("#fragment-table", DataTable)
        assert table.row_count == 8


@pytest.mark.asyncio
async def test_refresh_binding():
    """Test that 'r' samples again and updates rows in place."""
    aggregator = CountingAggregator()
    app = StatusPreviewApp(aggregator=aggregator, interval=60)
    async with app.run_test() as pilot:
        await settle(pilot)
        await pilot.press("r")
        await settle(pilot)

        assert aggregator.samples == 2
        table = pilot.app.query_one(FragmentTable).query_one(DataTable)
        assert table.row_count == 8


@pytest.mark.asyncio
async def test_app_quit_binding():
    """Test that 'q' binding triggers quit."""
    app = StatusPreviewApp(aggregator=CountingAggregator(), interval=60)
    async with app.run_test() as pilot:
        await pilot.press("q")
        assert pilot.app._exit


@pytest.mark.asyncio
async def test_slow_sample_keeps_ui_responsive():
    """Test a blocked sample runs off the event loop and refreshes do not overlap."""
    aggregator = GatedAggregator()
    app = StatusPreviewApp(aggregator=aggregator, interval=60)
    async with app.run_test() as pilot:
        try:
            await pilot.press("r")
            await pilot.pause()

            view = pilot.app.query_one("#status-line", StatusLineView)
            assert pilot.app.is_sampling
            assert view.status == ""
            assert aggregator.samples == 0
        finally:
            aggregator.gate.set()

        await settle(pilot)

        assert aggregator.samples == 1
        assert not pilot.app.is_sampling
        assert view.status.startswith("[Artist] - Title")
