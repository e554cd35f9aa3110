#!/usr/bin/env python3

"""CLI tool to configure a serial port through stty and show its settings"""

import argparse
import logging
import shlex

import ok_logging_setup

import stty_serial

ok_logging_setup.skip_traceback_for(stty_serial.SerialException)
ok_logging_setup.skip_traceback_for(stty_serial.SerialSettingInvalid)

PARITY_CHOICES = {p.name.lower(): p for p in stty_serial.Parity}

STOP_BITS_CHOICES = {
    "1": stty_serial.StopBits.ONE,
    "2": stty_serial.StopBits.TWO,
}

HANDSHAKE_CHOICES = {
    "none": stty_serial.Handshake.NONE,
    "rts": stty_serial.Handshake.REQUEST_TO_SEND,
    "xonxoff": stty_serial.Handshake.XON_XOFF,
    "rts-xonxoff": stty_serial.Handshake.REQUEST_TO_SEND_XON_XOFF,
}


def main(argv: list[str] | None = None):
    parser = argparse.ArgumentParser(
        description="Configure a serial port with stty."
    )
    parser.add_argument("port", help="device path, may end in a glob")
    parser.add_argument("--baud", "-b", type=int, help="baud rate")
    parser.add_argument("--data-bits", type=int, help="5, 6, 7 or 8")
    parser.add_argument("--parity", choices=PARITY_CHOICES)
    parser.add_argument("--stop-bits", choices=STOP_BITS_CHOICES)
    parser.add_argument("--handshake", choices=HANDSHAKE_CHOICES)
    parser.add_argument("--min", type=int, help="minimum bytes per read")
    parser.add_argument("--timeout", type=int, help="read timeout in ms")

    raw_group = parser.add_mutually_exclusive_group()
    raw_group.add_argument(
        "--raw", dest="raw", action="store_const", const=True, default=None
    )
    raw_group.add_argument(
        "--no-raw", dest="raw", action="store_const", const=False
    )

    drain_group = parser.add_mutually_exclusive_group()
    drain_group.add_argument(
        "--drain", dest="drain", action="store_const", const=True, default=None
    )
    drain_group.add_argument(
        "--no-drain", dest="drain", action="store_const", const=False
    )

    parser.add_argument(
        "--stty", default=stty_serial.STTY_PATH, help="stty executable"
    )
    parser.add_argument(
        "--dry-run",
        "-n",
        action="store_true",
        help="print the stty command instead of running it",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="log each stty call"
    )

    args = parser.parse_args(argv)
    ok_logging_setup.install(
        {"OK_LOGGING_LEVEL": "debug" if args.verbose else "info"}
    )

    opts = stty_serial.SerialOptions(stty_path=args.stty, raw_mode=args.raw)
    with stty_serial.SttySerialPort(args.port, opts) as port:
        port.enable_drain = args.drain
        if args.baud is not None:
            port.baud_rate = args.baud
        if args.min is not None:
            port.minimum_bytes_to_read = args.min
        if args.timeout is not None:
            port.read_timeout = args.timeout
        if args.data_bits is not None:
            port.data_bits = args.data_bits
        if args.stop_bits:
            port.stop_bits = STOP_BITS_CHOICES[args.stop_bits]
        if args.handshake:
            port.handshake = HANDSHAKE_CHOICES[args.handshake]
        if args.parity:
            port.parity = PARITY_CHOICES[args.parity]

        if args.dry_run:
            print(format_command(args.stty, port))
            return

        logging.info("🔌 Opening %s", args.port)
        port.open()
        logging.info("✅ Configured %s", port.port_name)
        print(port.port_name)
        print(port.query_settings(), end="")


def format_command(stty_path: str, port: stty_serial.SttySerialPort) -> str:
    """The stty command line that port.open() would run"""

    path = stty_serial.resolve_port_path(port.port_name)
    settings = port.settings
    return shlex.join(
        [
            stty_path,
            "-F",
            path,
            *settings.prefix_params(),
            *settings.all_params(),
        ]
    )


if __name__ == "__main__":
    main()
