import logging
from typing import Optional

from rich.text import Text
from textual import events as textual_events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal
from textual.widgets import Input, Label, ListItem, ListView, Static

from dispatcher import Dispatcher
from events import ContainerAction, Quit, Resize, SelectNext, SubmitCommand
from executors import CommandExecutor
from registry import ServerRegistry
from render import render
from session import SessionState


class DashboardApp(App):
    CSS = """
    Screen {
        layout: vertical;
    }
    #main {
        height: 1fr;
    }
    #servers {
        width: 24;
        height: 1fr;
    }
    #log {
        padding: 0 1;
    }
    #status {
        height: 2;
        color: $text-muted;
    }
    #command {
        height: 3;
    }
    """

    BINDINGS = [
        Binding("tab", "select_next", "Switch", priority=True, show=False),
        Binding("ctrl+s", "container('start')", "Start", priority=True, show=False),
        Binding("ctrl+x", "container('stop')", "Stop", priority=True, show=False),
        Binding("ctrl+r", "container('restart')", "Restart", priority=True, show=False),
        Binding("ctrl+d", "container('status')", "Status", priority=True, show=False),
        Binding("ctrl+c", "quit_session", "Quit", priority=True, show=False),
    ]

    def __init__(
        self,
        registry: ServerRegistry,
        executor: Optional[CommandExecutor] = None,
        status_ttl: float = 0.0,
    ):
        super().__init__()
        self.registry = registry
        self.status_ttl = status_ttl
        self.session = SessionState.start(registry)
        self.dispatcher = Dispatcher(
            registry,
            self.session,
            executor or CommandExecutor(),
            on_change=self._refresh_view,
        )
        self._shown_selection: Optional[int] = None

    def compose(self) -> ComposeResult:
        with Horizontal(id="main"):
            yield ListView(
                *[ListItem(Label(f"{s.name}\n{s.address}")) for s in self.registry],
                id="servers",
            )
            yield Static(id="log")
        yield Static(id="status")
        yield Input(placeholder="Type RCON command, press Enter to send", id="command")

    def on_mount(self) -> None:
        self.query_one("#command", Input).focus()
        self.run_worker(self._run_dispatcher(), exclusive=True)
        self.dispatcher.post(Resize(self.size.width, self.size.height))
        # status messages expire, so redraw even without events
        if self.status_ttl > 0:
            self.set_interval(1.0, self._tick)

    async def _run_dispatcher(self) -> None:
        try:
            await self.dispatcher.run()
        except Exception:
            logging.exception("Dispatcher crashed")
            self.exit(return_code=1)
            return
        self.exit()

    # ---------- event vocabulary ----------
    def on_resize(self, event: textual_events.Resize) -> None:
        self.dispatcher.post(Resize(event.size.width, event.size.height))

    def on_input_submitted(self, event: Input.Submitted) -> None:
        text = event.value
        event.input.value = ""
        self.dispatcher.post(SubmitCommand(text))

    def action_select_next(self) -> None:
        self.dispatcher.post(SelectNext())

    def action_container(self, action: str) -> None:
        self.dispatcher.post(ContainerAction(action))

    def action_quit_session(self) -> None:
        self.dispatcher.post(Quit())

    # ---------- projection ----------
    def _tick(self) -> None:
        self._refresh_view(self.session)

    def _refresh_view(self, state: SessionState) -> None:
        if state.quitting:
            return
        frame = render(state, self.registry, ttl=self.status_ttl)

        servers = self.query_one("#servers", ListView)
        servers.styles.width = frame.selector_width
        if self._shown_selection != state.selection_index:
            servers.index = state.selection_index
            self._shown_selection = state.selection_index

        log = self.query_one("#log", Static)
        log.styles.width = frame.log_width
        log.styles.height = frame.log_height
        log.update(Text(frame.log_text))

        self.query_one("#status", Static).update(Text(f"{frame.status}\n{frame.help_text}"))
