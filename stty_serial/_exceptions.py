"""Exception hierarchy for stty_serial"""


class SerialException(OSError):
    def __init__(
        self,
        message: str,
        port: str | None = None,
    ):
        super().__init__(f"{port}: {message}" if port else message)
        self.port = port


class SerialIoException(SerialException):
    pass


class SerialPortNotOpen(SerialIoException):
    pass


class SerialPortDisposed(SerialException):
    pass


class SerialOpenException(SerialException):
    pass


class SerialPortNotFound(SerialOpenException):
    pass


class SerialPlatformUnsupported(SerialException):
    pass


class SttyExecutionError(SerialException):
    """stty wrote to stderr (or could not be run at all)"""

    def __init__(
        self,
        message: str,
        port: str | None = None,
        *,
        command: str = "",
        stderr: str = "",
    ):
        super().__init__(message, port)
        self.command = command
        self.stderr = stderr


class SerialPortInvalid(ValueError):
    pass


class SerialSettingInvalid(ValueError):
    pass


class SerialSettingOutOfRange(SerialSettingInvalid):
    pass
