import pytest

import rcon_client
from rcon.exceptions import WrongPassword
from rcon_client import DEFAULT_RCON_PORT, RconClient, RconCommandError, RconConnectError, split_address


class FakeSourceClient:
    instances = []
    connect_error = None
    run_error = None

    def __init__(self, host, port, *, timeout=None, passwd=None):
        self.host, self.port, self.timeout, self.passwd = host, port, timeout, passwd
        self.closed = 0
        self.commands = []
        FakeSourceClient.instances.append(self)

    def connect(self, login=False):
        if self.connect_error:
            raise self.connect_error
        return self

    def run(self, command, *args):
        if self.run_error:
            raise self.run_error
        self.commands.append(command)
        return f"ran {command}"

    def close(self):
        self.closed += 1


@pytest.fixture
def fake_client(monkeypatch):
    FakeSourceClient.instances = []
    FakeSourceClient.connect_error = None
    FakeSourceClient.run_error = None
    monkeypatch.setattr(rcon_client, "Client", FakeSourceClient)
    return FakeSourceClient


@pytest.mark.parametrize(
    "address,expected",
    [
        ("1.2.3.4:27015", ("1.2.3.4", 27015)),
        ("example.org:25575", ("example.org", 25575)),
        ("example.org", ("example.org", DEFAULT_RCON_PORT)),
        ("[::1]:27016", ("::1", 27016)),
        (" host:1 ", ("host", 1)),
    ],
)
def test_split_address(address, expected):
    assert split_address(address) == expected


@pytest.mark.parametrize("address", ["host:abc", ":27015", ""])
def test_split_address_rejects_garbage(address):
    with pytest.raises(ValueError):
        split_address(address)


def test_connect_execute_close(fake_client):
    with RconClient(timeout=3).connect("1.2.3.4:27015", "pw") as connection:
        assert connection.execute("status") == "ran status"
    client = fake_client.instances[0]
    assert (client.host, client.port, client.timeout, client.passwd) == ("1.2.3.4", 27015, 3, "pw")
    assert client.closed == 1
    connection.close()
    assert client.closed == 1


def test_wrong_password(fake_client):
    fake_client.connect_error = WrongPassword()
    with pytest.raises(RconConnectError, match="failed to connect to h:1: authentication failed"):
        RconClient().connect("h:1", "bad")
    assert fake_client.instances[0].closed == 1


def test_connection_refused(fake_client):
    fake_client.connect_error = ConnectionRefusedError("refused")
    with pytest.raises(RconConnectError, match="failed to connect to h:1: refused"):
        RconClient().connect("h:1", "pw")


def test_bad_address_is_a_connect_error(fake_client):
    with pytest.raises(RconConnectError, match="failed to connect to h:x"):
        RconClient().connect("h:x", "pw")
    assert fake_client.instances == []


def test_execute_failure(fake_client):
    fake_client.run_error = TimeoutError("timed out")
    connection = RconClient().connect("h:1", "pw")
    with pytest.raises(RconCommandError, match="timed out"):
        connection.execute("status")


def test_execute_after_close(fake_client):
    connection = RconClient().connect("h:1", "pw")
    connection.close()
    with pytest.raises(RconCommandError, match="closed"):
        connection.execute("status")
