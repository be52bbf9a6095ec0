import asyncio

import pytest

from events import ContainerResult, RconResult, RequestKind
from rcon_client import RconCommandError, RconConnectError
from registry import ServerDescriptor, ServerRegistry


class FakeConnection:
    def __init__(self, response="", error=None):
        self.response = response
        self.error = error
        self.commands = []
        self.closed = False

    def execute(self, command):
        self.commands.append(command)
        if self.error:
            raise RconCommandError(self.error)
        return self.response

    def close(self):
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, *_):
        self.close()


class FakeRconClient:
    def __init__(self, response="", connect_error=None, command_error=None):
        self.connect_error = connect_error
        self.connection = FakeConnection(response, command_error)
        self.connects = []

    def connect(self, address, secret):
        self.connects.append((address, secret))
        if self.connect_error:
            raise RconConnectError(f"failed to connect to {address}: {self.connect_error}")
        return self.connection


class FakeDocker:
    def __init__(self, output="", returncode=0, error=None):
        self.output = output
        self.returncode = returncode
        self.error = error
        self.calls = []

    async def run(self, args):
        self.calls.append(list(args))
        if self.error:
            raise self.error
        return self.output, self.returncode


class GatedExecutor:
    """Finishes requests only when the test releases them, in any order."""

    def __init__(self):
        self.gates = {}
        self.requests = []

    def gate(self, payload):
        return self.gates.setdefault(payload, asyncio.Event())

    async def execute(self, request):
        self.requests.append(request)
        await self.gate(request.payload).wait()
        if request.kind is RequestKind.CONTAINER:
            return ContainerResult(server_name=request.target.name, label=request.payload, output="")
        return RconResult(server_name=request.target.name, label=request.payload, output=f"done {request.payload}")


async def wait_for(predicate, timeout=2.0):
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not reached in time")
        await asyncio.sleep(0.01)


@pytest.fixture
def server_a():
    return ServerDescriptor(name="A", address="1.2.3.4:27015", secret="x")


@pytest.fixture
def server_b():
    return ServerDescriptor(name="B", address="10.0.0.2:25575", secret="y", container_ref="mc-b")


@pytest.fixture
def server_c():
    return ServerDescriptor(name="C", address="10.0.0.3", secret="z", container_ref="mc-c")


@pytest.fixture
def registry(server_a, server_b, server_c):
    return ServerRegistry.load([server_a, server_b, server_c])


@pytest.fixture
def single_registry(server_a):
    return ServerRegistry.load([server_a])
