"""
Request -> result. Each executor performs exactly one external call and
always produces exactly one result; errors are folded into the result.
"""
import asyncio
import logging
import threading
from typing import Callable, Optional

from config_store import get_rcon_timeout
from events import CommandRequest, CommandResult, ContainerResult, RconResult, RequestKind
from rcon_client import RconClient, RconCommandError, RconConnectError
from registry import ServerDescriptor
from server_manager import ContainerExecError, DockerExecutor, UnknownActionError, container_args

NO_RESPONSE = "(no response)"
NO_CONTAINER = "no container configured"


def _in_daemon_thread(func: Callable, *args) -> asyncio.Future:
    """
    Runs a blocking call on a daemon thread. Unlike asyncio.to_thread the
    thread is not joined at shutdown, so a hung call cannot hold up exit.
    """
    loop = asyncio.get_running_loop()
    future = loop.create_future()

    def _deliver(setter, value) -> None:
        if not future.done():
            setter(value)

    def _post(setter, value) -> None:
        try:
            loop.call_soon_threadsafe(_deliver, setter, value)
        except RuntimeError:
            # loop closed after quit, nobody is waiting for this result
            pass

    def _worker() -> None:
        try:
            result = func(*args)
        except Exception as e:
            _post(future.set_exception, e)
        else:
            _post(future.set_result, result)

    threading.Thread(target=_worker, name="rcon-call", daemon=True).start()
    return future


def _rcon_call(client: RconClient, server: ServerDescriptor, command: str) -> str:
    with client.connect(server.address, server.secret) as connection:
        return connection.execute(command)


async def run_rcon(client: RconClient, server: ServerDescriptor, command: str) -> RconResult:
    logging.info(f"[RCON] {server.name} ({server.address}) > {command}")
    try:
        output = await _in_daemon_thread(_rcon_call, client, server, command)
    except RconConnectError as e:
        logging.warning(f"[RCON] {server.name}: {e}")
        return RconResult(server_name=server.name, label=command, error=str(e))
    except RconCommandError as e:
        logging.warning(f"[RCON] {server.name}: command {command!r} failed: {e}")
        return RconResult(server_name=server.name, label=command, error=str(e))

    return RconResult(server_name=server.name, label=command, output=output or NO_RESPONSE)


async def run_container(docker: DockerExecutor, server: ServerDescriptor, action: str) -> ContainerResult:
    if not server.container_ref:
        return ContainerResult(server_name=server.name, label=action, error=NO_CONTAINER)

    try:
        args = container_args(action, server.container_ref)
    except UnknownActionError as e:
        logging.error(f"[DOCKER] {server.name}: {e}")
        return ContainerResult(server_name=server.name, label=action, error=str(e))

    try:
        output, returncode = await docker.run(args)
    except ContainerExecError as e:
        logging.warning(f"[DOCKER] {server.name} {action}: {e}")
        return ContainerResult(server_name=server.name, label=action, error=str(e))

    output = output.strip()
    if returncode != 0:
        return ContainerResult(
            server_name=server.name,
            label=action,
            output=output,
            error=f"exit status {returncode}",
        )
    return ContainerResult(server_name=server.name, label=action, output=output)


class CommandExecutor:
    def __init__(self, rcon: Optional[RconClient] = None, docker: Optional[DockerExecutor] = None):
        self.rcon = rcon or RconClient(timeout=get_rcon_timeout())
        self.docker = docker or DockerExecutor()

    async def execute(self, request: CommandRequest) -> CommandResult:
        try:
            if request.kind is RequestKind.RCON:
                return await run_rcon(self.rcon, request.target, request.payload)
            if request.kind is RequestKind.CONTAINER:
                return await run_container(self.docker, request.target, request.payload)
            raise ValueError(f"unknown request kind: {request.kind}")
        except Exception as e:
            logging.exception(f"Executor for {request.target.name} crashed")
            if request.kind is RequestKind.CONTAINER:
                return ContainerResult(server_name=request.target.name, label=request.payload, error=str(e))
            return RconResult(server_name=request.target.name, label=request.payload, error=str(e))
