"""
Serial port library for POSIX systems that configures the line with the
stty utility instead of termios calls, and exposes the raw device stream.
"""

from beartype.claw import beartype_this_package as _beartype_me

# ruff: noqa: E402
_beartype_me()

from stty_serial._exceptions import (
    SerialException,
    SerialIoException,
    SerialOpenException,
    SerialPlatformUnsupported,
    SerialPortDisposed,
    SerialPortInvalid,
    SerialPortNotFound,
    SerialPortNotOpen,
    SerialSettingInvalid,
    SerialSettingOutOfRange,
    SttyExecutionError,
)

from stty_serial._params import Handshake, Parity, StopBits
from stty_serial._port import SerialOptions, SttySerialPort, resolve_port_path
from stty_serial._settings import UNSET, LineSettings
from stty_serial._stty import STTY_PATH, SttyCommand

__all__ = [n for n in dir() if not n.startswith("_")]
