import asyncio
import logging
from typing import Callable, Optional, Set

from events import (
    CommandRequest,
    ContainerAction,
    ContainerResult,
    Event,
    Quit,
    RconResult,
    RequestKind,
    Resize,
    SelectNext,
    SubmitCommand,
)
from executors import NO_RESPONSE
from registry import ServerRegistry
from server_manager import ACTION_STATUS, ACTION_VERB
from session import SessionState

NO_ACTIVE_SERVER = "❌ No active server selected."


def apply_event(
    state: SessionState,
    registry: ServerRegistry,
    event: Event,
    now: Optional[float] = None,
) -> Optional[CommandRequest]:
    """
    Applies one event to the session. Returns the request to launch, if any.
    The session is only ever mutated here.
    """
    if state.quitting:
        return None

    if isinstance(event, Resize):
        state.viewport.width = event.width
        state.viewport.height = event.height
        return None

    if isinstance(event, SelectNext):
        return _select_next(state, registry)

    if isinstance(event, SubmitCommand):
        return _submit_command(state, registry, event.text, now)

    if isinstance(event, ContainerAction):
        return _container_action(state, registry, event.action, now)

    if isinstance(event, Quit):
        state.quitting = True
        return None

    if isinstance(event, RconResult):
        _rcon_result(state, event, now)
        return None

    if isinstance(event, ContainerResult):
        _container_result(state, event, now)
        return None

    raise TypeError(f"unhandled event: {event!r}")


def _select_next(state: SessionState, registry: ServerRegistry) -> None:
    total = len(registry)
    if total == 0:
        return None
    state.selection_index = (state.selection_index + 1) % total
    state.active_server_name = registry.at(state.selection_index).name
    state.push_log(f"Active server: {state.active_server_name}")
    return None


def _submit_command(state: SessionState, registry: ServerRegistry, text: str, now) -> Optional[CommandRequest]:
    if not text:
        return None
    server = state.active_server(registry)
    if server is None:
        state.push_log(NO_ACTIVE_SERVER)
        return None
    state.push_log(f"[{server.name}] > {text}")
    state.set_status("Sending…", now)
    state.pending.begin(server.name, text)
    return CommandRequest(kind=RequestKind.RCON, target=server, payload=text)


def _container_action(state: SessionState, registry: ServerRegistry, action: str, now) -> Optional[CommandRequest]:
    server = state.active_server(registry)
    if server is None:
        state.push_log(NO_ACTIVE_SERVER)
        return None
    if not server.has_container:
        state.push_log(f"[{server.name}] ⚠️ No container configured")
        return None
    verb = ACTION_VERB.get(action, action)
    state.push_log(f"[{server.name}] 🐳 {verb}: {server.container_ref}")
    state.set_status(ACTION_STATUS.get(action, f"{action}…"), now)
    state.pending.begin(server.name, action)
    return CommandRequest(kind=RequestKind.CONTAINER, target=server, payload=action)


def _rcon_result(state: SessionState, result: RconResult, now) -> None:
    if result.error:
        state.push_log(f"[{result.server_name}] ⚠️ ERROR: {result.error}")
        state.set_status("Command failed", now)
        state.pending.end_failed(result.server_name, result.error, now)
        return
    state.push_log(f"[{result.server_name}] < {result.output or NO_RESPONSE}")
    state.set_status("OK", now)
    state.pending.end_success(result.server_name)


def _container_result(state: SessionState, result: ContainerResult, now) -> None:
    action = result.label
    if result.error:
        cause = result.error
        if result.output:
            cause = f"{cause}: {result.output}"
        state.push_log(f"[{result.server_name}] 🐳 {action} ERROR: {cause}")
        state.set_status(f"{action} failed", now)
        state.pending.end_failed(result.server_name, cause, now)
        return
    state.push_log(f"[{result.server_name}] 🐳 {action}: {result.output or 'success'}")
    state.set_status(f"{action} OK", now)
    state.pending.end_success(result.server_name)


class Dispatcher:
    """
    Single consumer of the event queue. Executors run as separate tasks and
    report back only by posting their result onto the same queue.
    """

    def __init__(
        self,
        registry: ServerRegistry,
        state: SessionState,
        executor,
        on_change: Optional[Callable[[SessionState], None]] = None,
    ):
        self.registry = registry
        self.state = state
        self.executor = executor
        self.on_change = on_change
        self.queue: asyncio.Queue = asyncio.Queue()
        self._tasks: Set[asyncio.Task] = set()

    def post(self, event: Event) -> None:
        self.queue.put_nowait(event)

    async def run(self) -> None:
        while not self.state.quitting:
            event = await self.queue.get()
            try:
                request = apply_event(self.state, self.registry, event)
            finally:
                self.queue.task_done()
            if self.on_change is not None:
                self.on_change(self.state)
            if request is not None and not self.state.quitting:
                self._launch(request)
        logging.info("Dispatcher stopped")

    def _launch(self, request: CommandRequest) -> None:
        task = asyncio.create_task(self._execute(request))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _execute(self, request: CommandRequest) -> None:
        result = await self.executor.execute(request)
        self.post(result)
