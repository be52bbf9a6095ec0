import time
from collections import deque
from dataclasses import dataclass, field
from typing import List, Optional

from registry import ServerDescriptor, ServerRegistry
from runtime_status import RequestTracker

MAX_LOG_LINES = 500


class LogBuffer:
    """Rolling log; the oldest lines fall off once max_lines is exceeded."""

    def __init__(self, max_lines: int = MAX_LOG_LINES) -> None:
        self._lines: deque = deque(maxlen=max_lines)

    def append(self, line: str) -> None:
        self._lines.append(line)

    def tail(self, count: int) -> List[str]:
        if count <= 0:
            return []
        if count >= len(self._lines):
            return list(self._lines)
        return list(self._lines)[-count:]

    def lines(self) -> List[str]:
        return list(self._lines)

    def __len__(self) -> int:
        return len(self._lines)


@dataclass
class Viewport:
    width: int = 0
    height: int = 0


@dataclass
class SessionState:
    active_server_name: Optional[str] = None
    selection_index: int = 0
    log: LogBuffer = field(default_factory=LogBuffer)
    status_text: str = ""
    status_set_at: float = 0.0
    viewport: Viewport = field(default_factory=Viewport)
    quitting: bool = False
    pending: RequestTracker = field(default_factory=RequestTracker)

    @classmethod
    def start(cls, registry: ServerRegistry) -> "SessionState":
        state = cls()
        state.push_log("Ready.")
        if len(registry) > 0:
            state.selection_index = 0
            state.active_server_name = registry.at(0).name
            state.push_log(f"Active server: {state.active_server_name}")
        else:
            state.push_log("⚠️ No servers configured. Please check the config file.")
        return state

    def push_log(self, line: str) -> None:
        self.log.append(line)

    def set_status(self, text: str, now: Optional[float] = None) -> None:
        self.status_text = text
        self.status_set_at = now if now is not None else time.time()

    def active_server(self, registry: ServerRegistry) -> Optional[ServerDescriptor]:
        return registry.lookup(self.active_server_name)
