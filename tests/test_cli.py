"""Unit tests for stty_serial.cli."""

import pytest

import stty_serial
from stty_serial import cli


@pytest.fixture(autouse=True)
def no_logging_install(mocker):
    return mocker.patch("ok_logging_setup.install")


def test_dry_run_prints_command(fake_stty, device, capsys):
    stty = fake_stty("echo ran >&2")  # fails if actually run
    cli.main(
        [
            device,
            "--stty",
            stty,
            "--baud",
            "9600",
            "--parity",
            "even",
            "--stop-bits",
            "2",
            "--handshake",
            "rts",
            "--no-raw",
            "--no-drain",
            "--dry-run",
        ]
    )
    expected = (
        f"{stty} -F {device} -drain sane -raw 9600 cstopb "
        "crtscts -ixoff -ixon parenb -cmspar -parodd"
    )
    assert expected in capsys.readouterr().out.splitlines()


def test_dry_run_without_options(fake_stty, device, capsys):
    stty = fake_stty("exit 0")
    cli.main([device, "--stty", stty, "-n"])
    assert f"{stty} -F {device} sane" in capsys.readouterr().out.splitlines()


def test_configures_and_reports(fake_stty, tmp_path, capsys):
    (tmp_path / "ttyACM1").write_bytes(b"")
    (tmp_path / "ttyACM0").write_bytes(b"")
    stty = fake_stty(
        'case "$*" in *" -a") echo "speed 115200 baud; line = 0;";; esac'
    )
    cli.main(
        [str(tmp_path / "ttyACM*"), "--stty", stty, "-b", "115200", "--raw"]
    )
    out = capsys.readouterr().out
    assert out.splitlines()[0] == str(tmp_path / "ttyACM0")
    assert "speed 115200 baud; line = 0;" in out


def test_stty_error_propagates(fake_stty, device):
    stty = fake_stty("echo 'stty: invalid integer argument' >&2")
    with pytest.raises(stty_serial.SttyExecutionError):
        cli.main([device, "--stty", stty, "--baud", "12"])


def test_no_matching_port(fake_stty, tmp_path):
    stty = fake_stty("exit 0")
    with pytest.raises(stty_serial.SerialPortNotFound):
        cli.main([str(tmp_path / "ttyUSB*"), "--stty", stty])


def test_bad_data_bits(fake_stty, device):
    stty = fake_stty("exit 0")
    with pytest.raises(stty_serial.SerialSettingOutOfRange):
        cli.main([device, "--stty", stty, "--data-bits", "9"])
