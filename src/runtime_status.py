import time
from typing import Dict, Optional, Tuple


FAILED_TTL_SECONDS = 900


class RequestTracker:
    """
    In-flight bookkeeping per server. Informational only: a second request
    against a busy server is never blocked or queued.
    """

    def __init__(self) -> None:
        self._status: Dict[str, dict] = {}

    def _state(self, server_name: str) -> dict:
        return self._status.setdefault(
            server_name,
            {"busy_count": 0, "label": "", "failed_at": 0.0, "failed_msg": ""},
        )

    def begin(self, server_name: str, label: str = "") -> None:
        state = self._state(server_name)
        state["busy_count"] += 1
        if label:
            state["label"] = label

    def end_success(self, server_name: str) -> None:
        state = self._status.get(server_name)
        if not state:
            return
        state["busy_count"] = max(0, state["busy_count"] - 1)
        if state["busy_count"] == 0:
            state["failed_at"] = 0.0
            state["failed_msg"] = ""
            state["label"] = ""

    def end_failed(self, server_name: str, message: str = "", now: Optional[float] = None) -> None:
        state = self._state(server_name)
        state["busy_count"] = max(0, state["busy_count"] - 1)
        state["failed_at"] = now if now is not None else time.time()
        state["failed_msg"] = str(message or "").strip()
        if state["busy_count"] == 0:
            state["label"] = ""

    def pending(self, server_name: str) -> int:
        state = self._status.get(server_name)
        return state["busy_count"] if state else 0

    def get(self, server_name: str, now: Optional[float] = None) -> Tuple[Optional[str], Optional[str]]:
        """("busy", label) | ("failed", message) | (None, None)"""
        state = self._status.get(server_name)
        if not state:
            return None, None

        if state["busy_count"] > 0:
            return "busy", state["label"] or None

        if state["failed_at"] > 0:
            age = (now if now is not None else time.time()) - state["failed_at"]
            if age <= FAILED_TTL_SECONDS:
                return "failed", state["failed_msg"] or None
        return None, None
