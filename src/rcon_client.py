import logging
from typing import Optional, Tuple

from rcon.exceptions import WrongPassword
from rcon.source import Client

DEFAULT_RCON_PORT = 27015


class RconConnectError(Exception):
    pass


class RconCommandError(Exception):
    pass


def split_address(address: str) -> Tuple[str, int]:
    """'host:port' -> (host, port); bare host uses the Source default port."""
    address = address.strip()
    if address.startswith("["):
        # [::1]:27015
        host, _, rest = address[1:].partition("]")
        port = rest.lstrip(":")
    elif address.count(":") == 1:
        host, port = address.split(":", 1)
    else:
        host, port = address, ""
    if not host:
        raise ValueError(f"missing host in address {address!r}")
    if not port:
        return host, DEFAULT_RCON_PORT
    try:
        return host, int(port)
    except ValueError as e:
        raise ValueError(f"invalid port in address {address!r}") from e


def _close_quietly(client: Client) -> None:
    try:
        client.close()
    except OSError:
        pass


class RconConnection:
    """One authenticated RCON session. Use once, then close."""

    def __init__(self, client: Client, address: str):
        self._client: Optional[Client] = client
        self.address = address

    def execute(self, command: str) -> str:
        if self._client is None:
            raise RconCommandError("connection already closed")
        try:
            return self._client.run(command)
        except Exception as e:
            raise RconCommandError(str(e) or e.__class__.__name__) from e

    def close(self) -> None:
        client, self._client = self._client, None
        if client is None:
            return
        try:
            client.close()
        except OSError as e:
            logging.warning(f"[RCON] close {self.address}: {e}")

    def __enter__(self) -> "RconConnection":
        return self

    def __exit__(self, *_) -> None:
        self.close()


class RconClient:
    def __init__(self, timeout: Optional[float] = None):
        self.timeout = timeout

    def connect(self, address: str, secret: str) -> RconConnection:
        try:
            host, port = split_address(address)
        except ValueError as e:
            raise RconConnectError(f"failed to connect to {address}: {e}") from e

        client = Client(host, port, timeout=self.timeout, passwd=secret)
        try:
            client.connect(login=True)
        except WrongPassword as e:
            _close_quietly(client)
            raise RconConnectError(f"failed to connect to {address}: authentication failed") from e
        except Exception as e:
            _close_quietly(client)
            raise RconConnectError(f"failed to connect to {address}: {e}") from e
        return RconConnection(client, address)
