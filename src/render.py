import time
from dataclasses import dataclass
from typing import List, Optional

from registry import ServerRegistry
from session import SessionState

SELECTOR_WIDTH = 24
MIN_LOG_WIDTH = 40
# rows taken by status bar, help line and input
CHROME_ROWS = 6

HELP_TEXT = " [Tab] switch | [Ctrl+S] start | [Ctrl+X] stop | [Ctrl+R] restart | [Ctrl+D] status | [Ctrl+C] quit"


@dataclass(frozen=True)
class Frame:
    selector_width: int
    log_width: int
    log_height: int
    log_lines: List[str]
    status: str
    help_text: str = HELP_TEXT

    @property
    def log_text(self) -> str:
        return "\n".join(self.log_lines)


def status_line(
    state: SessionState,
    registry: ServerRegistry,
    now: Optional[float] = None,
    ttl: float = 0.0,
) -> str:
    now = now if now is not None else time.time()
    if state.status_text:
        if ttl <= 0 or now - state.status_set_at <= ttl:
            return state.status_text

    server = state.active_server(registry)
    if server is None:
        return "No active server"
    text = f"Active: {server.name} ({server.address})"
    if server.container_ref:
        text += f" | Container: {server.container_ref}"
    activity, detail = state.pending.get(server.name, now)
    if activity == "busy":
        text += f" | {state.pending.pending(server.name)} pending"
        if detail:
            text += f": {detail}"
    elif activity == "failed":
        text += f" | last error: {detail or 'unknown'}"
    return text


def render(
    state: SessionState,
    registry: ServerRegistry,
    now: Optional[float] = None,
    ttl: float = 0.0,
) -> Frame:
    width, height = state.viewport.width, state.viewport.height
    log_width = max(width - SELECTOR_WIDTH - 2, MIN_LOG_WIDTH)
    log_height = max(height - CHROME_ROWS, 0)
    return Frame(
        selector_width=SELECTOR_WIDTH,
        log_width=log_width,
        log_height=log_height,
        log_lines=state.log.tail(log_height),
        status=status_line(state, registry, now, ttl),
    )
