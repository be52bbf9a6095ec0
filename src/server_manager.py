import asyncio
import logging
import os
from typing import List, Tuple

from events import CONTAINER_ACTIONS


class UnknownActionError(ValueError):
    pass


class ContainerExecError(Exception):
    pass


ACTION_STATUS = {
    "start": "Starting container…",
    "stop": "Stopping container…",
    "restart": "Restarting container…",
    "status": "Checking status…",
}

ACTION_VERB = {
    "start": "Starting container",
    "stop": "Stopping container",
    "restart": "Restarting container",
    "status": "Checking status",
}


def container_args(action: str, container_ref: str) -> List[str]:
    if action not in CONTAINER_ACTIONS:
        raise UnknownActionError(f"unknown action: {action}")
    if action == "status":
        return ["inspect", "--format", "{{.State.Status}}", container_ref]
    return [action, container_ref]


class DockerExecutor:
    """Runs the container CLI (docker, podman, ...) and captures combined output."""

    def __init__(self, binary: str = ""):
        self.binary = binary or os.getenv("RCONDASH_DOCKER", "docker")

    async def run(self, args: List[str]) -> Tuple[str, int]:
        cmd = [self.binary, *args]
        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
            )
        except OSError as e:
            raise ContainerExecError(f"failed to run {self.binary}: {e}") from e

        stdout, _ = await process.communicate()
        output = stdout.decode(errors="ignore") if stdout else ""
        logging.info(f"[DOCKER] {' '.join(cmd)} -> exit {process.returncode}")
        return output, process.returncode
