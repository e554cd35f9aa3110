import asyncio
import contextlib
import fnmatch
import io
import logging
import os
import select

import pydantic

from stty_serial import _exceptions
from stty_serial import _params
from stty_serial import _settings
from stty_serial import _stty

log = logging.getLogger("stty_serial.port")

UNKNOWN_BAUD_RATE = -1


class SerialOptions(pydantic.BaseModel):
    stty_path: str = _stty.STTY_PATH
    raw_mode: bool | None = True
    discard_chunk_size: int = pydantic.Field(default=128, gt=0)


def resolve_port_path(pattern: str) -> str:
    """Returns the lowest-sorting file matching a possibly wildcarded path.

    Only the last path component may contain wildcards (fnmatch syntax).
    Entries are compared as plain strings, so /dev/ttyUSB10 comes before
    /dev/ttyUSB2.
    """

    directory, name = os.path.split(pattern)
    try:
        entries = os.listdir(directory or ".")
    except OSError as ex:
        message = f"Can't list {directory or '.'}"
        raise _exceptions.SerialPortNotFound(message, pattern) from ex

    found = sorted(
        path
        for path in (os.path.join(directory, e) for e in entries)
        if fnmatch.fnmatchcase(os.path.basename(path), name)
        and not os.path.isdir(path)
    )
    log.debug("%d files match %r", len(found), pattern)
    if not found:
        raise _exceptions.SerialPortNotFound("No ports match", pattern)
    return found[0]


class SttySerialPort(contextlib.AbstractContextManager):
    """A serial port configured by running stty on its device file.

    Settings assigned before open() are remembered and sent in one stty
    call when the port opens; settings assigned while open are sent
    straight away. Settings never assigned are left as the device has them.
    """

    INFINITE_TIMEOUT = 0

    @pydantic.validate_call(config=dict(arbitrary_types_allowed=True))
    def __init__(
        self,
        port: str,
        opts: SerialOptions = SerialOptions(),
        *,
        stty: _stty.SttyCommand | None = None,
    ):
        """Prepares (but does not open) a port.

        'port' is a device path such as /dev/ttyUSB0, or a pattern such as
        /dev/ttyUSB* which picks the first match each time the port opens.
        """

        if not port:
            raise _exceptions.SerialPortInvalid("Serial port path is empty")

        if stty is None:
            stty = _stty.SttyCommand(opts.stty_path)
        if not stty.is_available():
            message = f"No stty at {stty.path}"
            raise _exceptions.SerialPlatformUnsupported(message, port)

        self._stty = stty
        self._opts = opts
        self._base_path = port
        self._port = port
        self._stream: io.FileIO | None = None
        self._disposed = False

        raw = _settings.UNSET if opts.raw_mode is None else opts.raw_mode
        self._settings = _settings.LineSettings(raw_mode=raw)

    def __del__(self) -> None:
        if getattr(self, "_stream", None):
            self._stream.close()

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.dispose()

    def __repr__(self) -> str:
        return f"SttySerialPort({self._base_path!r})"

    def __str__(self) -> str:
        return self._port

    #
    # State
    #

    @property
    def port_name(self) -> str:
        return self._port

    @property
    def is_open(self) -> bool:
        return self._stream is not None

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    @property
    def base_stream(self) -> io.FileIO:
        return self._open_stream()

    @property
    def settings(self) -> _settings.LineSettings:
        return self._settings

    #
    # Line settings
    #

    @property
    def enable_raw_mode(self) -> bool:
        """Disables as much tty input/output processing as stty allows"""

        return _or_default(self._settings.raw_mode, False)

    @enable_raw_mode.setter
    @pydantic.validate_call
    def enable_raw_mode(self, value: bool) -> None:
        self._set(_params.raw_mode_params(value), raw_mode=value)
        if self._stream is not None:
            # raw is composite and can clobber other settings; reapply them
            self._apply_all()

    @property
    def enable_drain(self) -> bool | None:
        """Whether stty waits for output to drain before changing settings.

        None (the default) passes neither option. False avoids a stty hang
        while flow control holds output back.
        """

        return _or_default(self._settings.drain, None)

    @enable_drain.setter
    @pydantic.validate_call
    def enable_drain(self, value: bool | None) -> None:
        self._check_not_disposed()
        if value is None:
            self._settings = self._settings.replace(drain=_settings.UNSET)
            return

        if self._stream is not None:
            # sent on its own, without the previous drain prefix
            self._stty.run_tokens(
                [*_params.port_params(self._port), *_params.drain_params(value)]
            )
        self._settings = self._settings.replace(drain=value)

    @property
    def minimum_bytes_to_read(self) -> int:
        """Bytes a read waits for (unless read_timeout expires first)"""

        return _or_default(self._settings.min_bytes_to_read, 0)

    @minimum_bytes_to_read.setter
    @pydantic.validate_call
    def minimum_bytes_to_read(self, value: int) -> None:
        self._set(_params.min_bytes_params(value), min_bytes_to_read=value)

    @property
    def read_timeout(self) -> int:
        """Milliseconds a read may block (rounded to tenths of a second).

        INFINITE_TIMEOUT (0) waits for minimum_bytes_to_read.
        """

        return _or_default(self._settings.read_timeout, self.INFINITE_TIMEOUT)

    @read_timeout.setter
    @pydantic.validate_call
    def read_timeout(self, value: int) -> None:
        self._set(_params.read_timeout_params(value), read_timeout=value)

    @property
    def baud_rate(self) -> int:
        return _or_default(self._settings.baud_rate, UNKNOWN_BAUD_RATE)

    @baud_rate.setter
    @pydantic.validate_call
    def baud_rate(self, value: int) -> None:
        self._set(_params.baud_params(value), baud_rate=value)

    @property
    def data_bits(self) -> int:
        return _or_default(self._settings.data_bits, 8)

    @data_bits.setter
    @pydantic.validate_call
    def data_bits(self, value: int) -> None:
        self._set(_params.data_bits_params(value), data_bits=value)

    @property
    def stop_bits(self) -> _params.StopBits:
        return _or_default(self._settings.stop_bits, _params.StopBits.ONE)

    @stop_bits.setter
    @pydantic.validate_call
    def stop_bits(self, value: _params.StopBits) -> None:
        self._set(_params.stop_bits_params(value), stop_bits=value)

    @property
    def parity(self) -> _params.Parity:
        return _or_default(self._settings.parity, _params.Parity.NONE)

    @parity.setter
    @pydantic.validate_call
    def parity(self, value: _params.Parity) -> None:
        self._set(_params.parity_params(value), parity=value)

    @property
    def handshake(self) -> _params.Handshake:
        return _or_default(self._settings.handshake, _params.Handshake.NONE)

    @handshake.setter
    @pydantic.validate_call
    def handshake(self, value: _params.Handshake) -> None:
        self._set(_params.handshake_params(value), handshake=value)

    #
    # Lifecycle
    #

    @pydantic.validate_call
    def open(self) -> None:
        """Opens the device file and applies all assigned settings"""

        self._check_not_disposed()
        if self._stream is not None:
            return

        self._port = resolve_port_path(self._base_path)
        log.debug("Opening %s (%r)", self._port, self._base_path)
        try:
            fd = os.open(self._port, os.O_RDWR | os.O_NOCTTY)
        except OSError as ex:
            message = "Serial port open error"
            raise _exceptions.SerialOpenException(message, self._port) from ex

        with contextlib.ExitStack() as cleanup:
            stream = cleanup.enter_context(os.fdopen(fd, "r+b", buffering=0))
            self._apply_all()
            self._stream = stream
            cleanup.pop_all()

    @pydantic.validate_call
    def close(self) -> None:
        """Closes the device file; the port may be opened again"""

        self._check_not_disposed()
        if self._stream is not None:
            log.debug("Closing %s", self._port)
            self._stream.close()
            self._stream = None

    @pydantic.validate_call
    def dispose(self) -> None:
        """Closes the port for good; later calls (except this) will fail"""

        if not self._disposed:
            self.close()
            self._disposed = True

    #
    # Buffers
    #

    @pydantic.validate_call
    def discard_in_buffer(self) -> None:
        """Reads and drops input until a read comes back empty.

        With minimum_bytes_to_read above 0 and no read_timeout this blocks
        until more data arrives.
        """

        stream, size = self._open_stream(), self._opts.discard_chunk_size
        while stream.read(size):
            pass

    @pydantic.validate_call
    async def discard_in_buffer_async(self) -> None:
        """Like discard_in_buffer, but waits on the event loop.

        Only reads once the device is readable, so cancelling leaves later
        input for the next reader. If reads would not block (no minimum,
        raw mode) this also stops when nothing arrives within read_timeout.
        """

        stream, size = self._open_stream(), self._opts.discard_chunk_size
        idle = self._read_idle_timeout()
        while True:
            if not _is_readable(stream):
                try:
                    await asyncio.wait_for(_wait_readable(stream), idle)
                except asyncio.TimeoutError:
                    return
            if not stream.read(size):
                return

    @pydantic.validate_call
    def discard_out_buffer(self) -> None:
        """Flushes the stream (this does not drop data queued in the tty)"""

        self._open_stream().flush()

    @pydantic.validate_call
    async def discard_out_buffer_async(self) -> None:
        # the stream is unbuffered, so flush never waits on the device
        self._open_stream().flush()

    @pydantic.validate_call
    def query_settings(self) -> str:
        """Returns stty's full report (-a) for the open port"""

        self._open_stream()
        return self._stty.run_tokens(
            [*_params.port_params(self._port), *_params.list_all_params()]
        )

    #
    # Internals
    #

    def _check_not_disposed(self) -> None:
        if self._disposed:
            message = "Serial port was disposed"
            raise _exceptions.SerialPortDisposed(message, self._port)

    def _open_stream(self) -> io.FileIO:
        self._check_not_disposed()
        if self._stream is None:
            message = "Serial port is not open"
            raise _exceptions.SerialPortNotOpen(message, self._port)
        return self._stream

    def _set(self, params: list[str], **changes) -> None:
        """Sends params if open, then stores changes (only if that worked)"""

        self._check_not_disposed()
        if self._stream is not None:
            self._run(params)
        self._settings = self._settings.replace(**changes)

    def _read_idle_timeout(self) -> float | None:
        """Seconds an empty read would wait, or None if reads block for data"""

        settings = self._settings
        if settings.raw_mode is not True:
            return None  # canonical (or unknown) mode waits for a line
        if _or_default(settings.min_bytes_to_read, 1) > 0:
            return None
        timeout = _or_default(settings.read_timeout, self.INFINITE_TIMEOUT)
        return _params.tenths_from_ms(timeout) / 10

    def _apply_all(self) -> None:
        self._run(self._settings.all_params())

    def _run(self, params: list[str]) -> str:
        return self._stty.run_tokens(
            [
                *_params.port_params(self._port),
                *self._settings.prefix_params(),
                *params,
            ]
        )


def _or_default(value, default):
    return default if value is _settings.UNSET else value


def _is_readable(stream: io.FileIO) -> bool:
    readable, _, _ = select.select([stream], [], [], 0)
    return bool(readable)


async def _wait_readable(stream: io.FileIO) -> None:
    loop = asyncio.get_running_loop()
    ready = loop.create_future()

    def on_readable():
        if not ready.done():
            ready.set_result(None)

    loop.add_reader(stream.fileno(), on_readable)
    try:
        await ready
    finally:
        loop.remove_reader(stream.fileno())
