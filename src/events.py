"""Events consumed by the dispatcher and the requests it emits.

Input events come from the front end, result events from the executors.
Both travel through the same queue and are handled one at a time.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from registry import ServerDescriptor

CONTAINER_ACTIONS = ("start", "stop", "restart", "status")


class RequestKind(str, Enum):
    RCON = "rcon"
    CONTAINER = "container"


# ---------- input events ----------
@dataclass(frozen=True)
class Resize:
    width: int
    height: int


@dataclass(frozen=True)
class SelectNext:
    pass


@dataclass(frozen=True)
class SubmitCommand:
    text: str


@dataclass(frozen=True)
class ContainerAction:
    action: str


@dataclass(frozen=True)
class Quit:
    pass


# ---------- result events ----------
@dataclass(frozen=True)
class RconResult:
    server_name: str
    label: str
    output: Optional[str] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class ContainerResult:
    server_name: str
    label: str
    output: Optional[str] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class CommandRequest:
    kind: RequestKind
    target: ServerDescriptor
    payload: str


InputEvent = Union[Resize, SelectNext, SubmitCommand, ContainerAction, Quit]
CommandResult = Union[RconResult, ContainerResult]
Event = Union[InputEvent, RconResult, ContainerResult]
