"""dwmstatus - Terminal preview of the status line."""

from textual.app import App, ComposeResult
from textual.containers import Container
from textual.widgets import DataTable, Footer, Static

from dwmstatus import config
from dwmstatus.models import MetricFragment, StatusFragments
from dwmstatus.monitor import StatusAggregator, compose_status


def fragment_rows(fragments: StatusFragments) -> list[tuple[str, str, str]]:
    """Flatten fragments into ``(metric, icon, value)`` rows in output order."""
    rows = [
        ("song", "", fragments.song),
        ("wifi", "", fragments.wifi.strip()),
    ]
    pairs: list[tuple[str, MetricFragment | None]] = [
        ("cpu", fragments.cpu),
        ("memory", fragments.memory),
        ("disk", fragments.disk),
        ("volume", fragments.volume),
        ("battery", fragments.battery),
        ("date", fragments.date),
        ("time", fragments.time),
    ]
    for name, fragment in pairs:
        if fragment is None:
            continue
        rows.append((name, fragment.icon.strip(), fragment.text.strip()))
    return rows


class StatusLineView(Static):
    """The composed line exactly as dwm would receive it."""

    DEFAULT_CSS = """
    StatusLineView {
        height: auto;
        padding: 1;
        background: $surface;
    }
    """

    def __init__(self, *args, **kwargs) -> None:
        """Initialize StatusLineView."""
        super().__init__("Sampling...", *args, markup=False, **kwargs)
        self._status = ""

    @property
    def status(self) -> str:
        """Last status line shown."""
        return self._status

    def show_status(self, status: str) -> None:
        """Replace the displayed line."""
        self._status = status
        self.update(status)


class FragmentTable(Container):
    """Per-metric breakdown of the current status line."""

    DEFAULT_CSS = """
    FragmentTable {
        height: 1fr;
        border: solid $primary;
    }
    """

    def __init__(self, *args, **kwargs) -> None:
        """Initialize FragmentTable."""
        super().__init__(*args, **kwargs)
        self._metrics: set[str] = set()

    def compose(self) -> ComposeResult:
        """Compose the fragment table."""
        yield DataTable(id="fragment-table")

    def on_mount(self) -> None:
        """Add columns when mounted."""
        table = self.query_one("#fragment-table", DataTable)
        table.cursor_type = "row"
        table.add_column("Metric", key="metric", width=10)
        table.add_column("Icon", key="icon", width=6)
        table.add_column("Value", key="value")

    def update_fragments(self, fragments: StatusFragments) -> None:
        """Update existing rows in place and add rows for new metrics."""
        table = self.query_one("#fragment-table", DataTable)
        for metric, icon, value in fragment_rows(fragments):
            if metric in self._metrics:
                table.update_cell(metric, "icon", icon)
                table.update_cell(metric, "value", value)
            else:
                table.add_row(metric, icon, value, key=metric)
                self._metrics.add(metric)


class StatusPreviewApp(App):
    """Live preview of the dwm status line in a terminal."""

    TITLE = "dwm-status"
    SUB_TITLE = "Status line preview"

    CSS = """
    Screen {
        layout: vertical;
    }

    #status-line {
        dock: top;
    }
    """

    BINDINGS = [
        ("q", "quit", "Quit"),
        ("r", "refresh", "Refresh"),
    ]

    def __init__(
        self,
        aggregator: StatusAggregator | None = None,
        interval: float = config.SLEEP_INTERVAL,
    ) -> None:
        """Initialize the StatusPreviewApp."""
        super().__init__()
        self._aggregator = aggregator if aggregator is not None else StatusAggregator()
        self._interval = interval
        self._sampling = False

    def compose(self) -> ComposeResult:
        """Compose the application layout."""
        yield StatusLineView(id="status-line")
        yield FragmentTable()
        yield Footer()

    def on_mount(self) -> None:
        """Sample once immediately, then on every interval."""
        self._refresh_status()
        self.set_interval(self._interval, self._refresh_status)

    @property
    def is_sampling(self) -> bool:
        """Whether a sample is still running in the background."""
        return self._sampling

    def _refresh_status(self) -> None:
        """
        Start a background sample unless one is still running.

        Sampling shells out to playerctl and queries the mixer, so it runs in a
        thread worker to keep the UI responsive. Ticks that arrive while a
        sample is in flight are skipped so the CPU tracker is never shared.
        """
        if self._sampling:
            return
        self._sampling = True
        self.run_worker(self._sample_in_thread, thread=True, exit_on_error=False)

    def _sample_in_thread(self) -> None:
        """Sample all sources and hand the result to the UI thread."""
        try:
            fragments = self._aggregator.sample()
            self.call_from_thread(self._show_fragments, fragments)
        finally:
            self._sampling = False

    def _show_fragments(self, fragments: StatusFragments) -> None:
        """Update both widgets from one sample."""
        self.query_one("#status-line", StatusLineView).show_status(compose_status(fragments))
        self.query_one(FragmentTable).update_fragments(fragments)

    def action_refresh(self) -> None:
        """Handle refresh action - sample right away."""
        self._refresh_status()


def main() -> None:
    """Entry point for the dwm-status-preview command."""
    app = StatusPreviewApp()
    app.run()


if __name__ == "__main__":
    main()
