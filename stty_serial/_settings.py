import msgspec
import msgspec.structs

from stty_serial import _params

UNSET = msgspec.UNSET


class LineSettings(msgspec.Struct, frozen=True, kw_only=True):
    """Line settings requested for a port; UNSET fields are never sent"""

    raw_mode: bool | msgspec.UnsetType = UNSET
    min_bytes_to_read: int | msgspec.UnsetType = UNSET
    read_timeout: int | msgspec.UnsetType = UNSET
    baud_rate: int | msgspec.UnsetType = UNSET
    data_bits: int | msgspec.UnsetType = UNSET
    stop_bits: _params.StopBits | msgspec.UnsetType = UNSET
    parity: _params.Parity | msgspec.UnsetType = UNSET
    handshake: _params.Handshake | msgspec.UnsetType = UNSET
    drain: bool | msgspec.UnsetType = UNSET

    def replace(self, **changes) -> "LineSettings":
        return msgspec.structs.replace(self, **changes)

    def prefix_params(self) -> list[str]:
        """Options that govern how stty applies the rest of the command"""

        if self.drain is UNSET:
            return []
        return _params.drain_params(self.drain)

    def all_params(self) -> list[str]:
        """Every set field as one command, after a reset to sane.

        Order matters: later tokens override parts of earlier composite
        ones (sane, raw), so raw comes straight after sane.
        """

        out = _params.sane_params()
        for value, to_params in (
            (self.raw_mode, _params.raw_mode_params),
            (self.baud_rate, _params.baud_params),
            (self.min_bytes_to_read, _params.min_bytes_params),
            (self.read_timeout, _params.read_timeout_params),
            (self.data_bits, _params.data_bits_params),
            (self.stop_bits, _params.stop_bits_params),
            (self.handshake, _params.handshake_params),
            (self.parity, _params.parity_params),
        ):
            if value is not UNSET:
                out.extend(to_params(value))
        return out
