import contextlib
import io
import os
import pty
import shlex
import typing

import ok_logging_setup
import pytest

import stty_serial

ok_logging_setup.install(
    {
        "OK_LOGGING_LEVEL": "stty_serial=DEBUG,WARNING",
        "OK_LOGGING_OUTPUT": "stdout",
    }
)


class PseudoTtySerial(typing.NamedTuple):
    path: str
    control: io.FileIO
    simulated: io.FileIO


class SpyStty(stty_serial.SttyCommand):
    """Records stty argument strings instead of running stty"""

    def __init__(self):
        super().__init__(path="/nonexistent/stty")
        self.calls: list[str] = []
        self.failing_calls: set[int] = set()

    def is_available(self) -> bool:
        return True

    def run(self, arguments: str) -> str:
        self.calls.append(arguments)
        if len(self.calls) - 1 in self.failing_calls:
            raise stty_serial.SttyExecutionError(
                "stty: invalid argument", command=arguments, stderr="bad"
            )
        return "spy output\n"

    def fail_next(self, count: int = 1) -> None:
        start = len(self.calls)
        self.failing_calls.update(range(start, start + count))

    @property
    def tokens(self) -> list[list[str]]:
        return [shlex.split(c) for c in self.calls]


@pytest.fixture
def pty_serial():
    with contextlib.ExitStack() as cleanup:
        ctrl_fd, sim_fd = pty.openpty()
        path = os.ttyname(sim_fd)
        ctrl = cleanup.enter_context(os.fdopen(ctrl_fd, "r+b", buffering=0))
        sim = cleanup.enter_context(os.fdopen(sim_fd, "r+b", buffering=0))
        yield PseudoTtySerial(path=path, control=ctrl, simulated=sim)


@pytest.fixture
def spy_stty():
    return SpyStty()


@pytest.fixture
def device(tmp_path):
    """A regular file standing in for a serial device"""

    path = tmp_path / "ttyFAKE0"
    path.write_bytes(b"")
    return str(path)


@pytest.fixture
def make_port(spy_stty):
    """Builds ports wired to the spy, with raw mode initially unset"""

    ports = []

    def make(path: str, **opts) -> stty_serial.SttySerialPort:
        opts.setdefault("raw_mode", None)
        port = stty_serial.SttySerialPort(
            path, stty_serial.SerialOptions(**opts), stty=spy_stty
        )
        ports.append(port)
        return port

    yield make
    for port in ports:
        port.dispose()


@pytest.fixture
def fake_stty(tmp_path):
    """Writes an executable shell script to stand in for stty"""

    def write(body: str) -> str:
        path = tmp_path / "stty"
        path.write_text(f"#!/bin/sh\n{body}\n")
        path.chmod(0o755)
        return str(path)

    return write
