"""Unit tests for stty_serial._settings."""

import itertools

import msgspec
import msgspec.structs
import pytest

from stty_serial import _params
from stty_serial._params import Handshake, Parity, StopBits
from stty_serial._settings import UNSET, LineSettings

# (field, value, tokens) in the order a full reapplication sends them
FIELD_CHECKS = [
    ("raw_mode", True, _params.raw_mode_params(True)),
    ("baud_rate", 9600, ["9600"]),
    ("min_bytes_to_read", 1, ["min", "1"]),
    ("read_timeout", 250, ["time", "3"]),
    ("data_bits", 7, ["cs7"]),
    ("stop_bits", StopBits.TWO, ["cstopb"]),
    ("handshake", Handshake.XON_XOFF, ["-crtscts", "ixoff", "ixon"]),
    ("parity", Parity.EVEN, ["parenb", "-cmspar", "-parodd"]),
]


def test_defaults_are_unset():
    settings = LineSettings()
    for field in msgspec.structs.fields(LineSettings):
        assert getattr(settings, field.name) is UNSET
    assert settings.all_params() == ["sane"]
    assert settings.prefix_params() == []


def test_unset_is_distinct_from_falsy_values():
    settings = LineSettings(raw_mode=False, min_bytes_to_read=0, drain=False)
    assert settings.all_params() == ["sane", "-raw", "min", "0"]
    assert settings.prefix_params() == ["-drain"]


@pytest.mark.parametrize(
    "subset",
    [
        subset
        for n in range(len(FIELD_CHECKS) + 1)
        for subset in itertools.combinations(FIELD_CHECKS, n)
    ],
)
def test_all_params_sends_only_set_fields(subset):
    settings = LineSettings(**{field: value for field, value, _ in subset})
    expected = ["sane"] + [t for _, _, tokens in subset for t in tokens]
    assert settings.all_params() == expected


def test_replace_keeps_original():
    before = LineSettings(baud_rate=9600)
    after = before.replace(baud_rate=115200, drain=True)
    assert before.baud_rate == 9600 and before.drain is UNSET
    assert after.baud_rate == 115200 and after.drain is True


def test_drain_prefix():
    assert LineSettings(drain=True).prefix_params() == ["drain"]
    assert LineSettings(drain=False).prefix_params() == ["-drain"]
    # drain is never part of the line settings themselves
    assert LineSettings(drain=True).all_params() == ["sane"]
