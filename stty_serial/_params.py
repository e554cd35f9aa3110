"""Translation of serial line settings into stty arguments"""

import enum

import serial
import typeguard

from stty_serial import _exceptions


class StopBits(enum.Enum):
    """Stop bit count; values match pyserial's STOPBITS_* constants"""

    NONE = 0
    ONE = serial.STOPBITS_ONE
    ONE_POINT_FIVE = serial.STOPBITS_ONE_POINT_FIVE
    TWO = serial.STOPBITS_TWO


class Parity(enum.Enum):
    """Parity mode; values match pyserial's PARITY_* constants"""

    NONE = serial.PARITY_NONE
    ODD = serial.PARITY_ODD
    EVEN = serial.PARITY_EVEN
    MARK = serial.PARITY_MARK
    SPACE = serial.PARITY_SPACE


class Handshake(enum.Enum):
    """Flow control; see .rtscts and .xonxoff for pyserial's equivalents"""

    NONE = "none"
    REQUEST_TO_SEND = "rtscts"
    XON_XOFF = "xonxoff"
    REQUEST_TO_SEND_XON_XOFF = "rtscts+xonxoff"

    @property
    def rtscts(self) -> bool:
        return "rtscts" in self.value

    @property
    def xonxoff(self) -> bool:
        return "xonxoff" in self.value


# "raw" alone leaves echo and modem control on; these always follow it.
RAW_MODE_OVERRIDES = [
    "-hupcl",  # no hangup when the last process closes the tty
    "-clocal",
    "-iexten",
    "-echo",
    "-echoe",
    "-echok",
    "-echonl",
    "-echoprt",
    "-echoctl",
    "-echoke",
]

_STOP_BITS_PARAMS = {
    StopBits.ONE: ["-cstopb"],
    StopBits.TWO: ["cstopb"],
}

_PARITY_PARAMS = {
    Parity.NONE: ["-parenb", "-cmspar"],
    Parity.ODD: ["parenb", "-cmspar", "parodd"],
    Parity.EVEN: ["parenb", "-cmspar", "-parodd"],
    Parity.MARK: ["-parenb", "cmspar", "parodd"],
    Parity.SPACE: ["-parenb", "cmspar", "-parodd"],
}


@typeguard.typechecked
def port_params(port: str) -> list[str]:
    return ["-F", port]


@typeguard.typechecked
def list_all_params() -> list[str]:
    return ["-a"]


@typeguard.typechecked
def sane_params() -> list[str]:
    """Composite reset to stty's defaults (cread icrnl opost isig icanon
    echo ... and default special characters)"""

    return ["sane"]


@typeguard.typechecked
def raw_mode_params(enabled: bool) -> list[str]:
    return ["raw", *RAW_MODE_OVERRIDES] if enabled else ["-raw"]


@typeguard.typechecked
def drain_params(enabled: bool) -> list[str]:
    return ["drain"] if enabled else ["-drain"]


@typeguard.typechecked
def baud_params(baud_rate: int) -> list[str]:
    # stty itself rejects rates the driver doesn't support
    return [str(baud_rate)]


@typeguard.typechecked
def min_bytes_params(byte_count: int) -> list[str]:
    return ["min", str(byte_count)]


@typeguard.typechecked
def tenths_from_ms(milliseconds: int) -> int:
    """Rounds milliseconds to stty's tenths of a second, ties up"""

    # truncates toward zero, so -149..-51 give 0 rather than -1
    return int((milliseconds + 50) / 100)


@typeguard.typechecked
def read_timeout_params(milliseconds: int) -> list[str]:
    return ["time", str(tenths_from_ms(milliseconds))]


@typeguard.typechecked
def data_bits_params(data_bits: int) -> list[str]:
    if not 5 <= data_bits <= 8:
        message = f"Data bits must be between 5 and 8 (not {data_bits})"
        raise _exceptions.SerialSettingOutOfRange(message)
    return [f"cs{data_bits}"]


@typeguard.typechecked
def stop_bits_params(stop_bits: StopBits) -> list[str]:
    if (params := _STOP_BITS_PARAMS.get(stop_bits)) is None:
        message = f"Stop bits can't be set to {stop_bits.name} with stty"
        raise _exceptions.SerialSettingInvalid(message)
    return list(params)


@typeguard.typechecked
def parity_params(parity: Parity) -> list[str]:
    if (params := _PARITY_PARAMS.get(parity)) is None:
        raise _exceptions.SerialSettingInvalid(f"Invalid parity {parity!r}")
    return list(params)


@typeguard.typechecked
def handshake_params(handshake: Handshake) -> list[str]:
    return [
        "crtscts" if handshake.rtscts else "-crtscts",
        "ixoff" if handshake.xonxoff else "-ixoff",
        "ixon" if handshake.xonxoff else "-ixon",
    ]
