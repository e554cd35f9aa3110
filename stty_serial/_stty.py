import logging
import os
import shlex
import subprocess
from collections.abc import Iterable

from stty_serial import _exceptions

STTY_PATH = "/bin/stty"

log = logging.getLogger("stty_serial.stty")


class SttyCommand:
    """Runs the stty utility, one process per call"""

    def __init__(self, path: str = STTY_PATH):
        self.path = path

    def __repr__(self) -> str:
        return f"SttyCommand({self.path!r})"

    def is_available(self) -> bool:
        """True if the stty executable exists at self.path"""

        return os.path.isfile(self.path)

    def run(self, arguments: str) -> str:
        """Runs stty with a space-separated argument string, returns stdout.

        Any output on stderr is treated as failure, whatever the exit code,
        since stty reports settings it could not apply that way.
        """

        argv = [self.path, *shlex.split(arguments)]
        command = shlex.join(argv)
        log.debug("Running: %s", command)
        try:
            # communicate() drains stdout and stderr together before waiting
            result = subprocess.run(
                argv,
                stdin=subprocess.DEVNULL,
                capture_output=True,
                encoding="utf-8",
                errors="replace",
                check=False,
            )
        except OSError as ex:
            raise _exceptions.SttyExecutionError(
                f"Can't run {self.path}", command=command
            ) from ex

        if result.stderr.strip():
            raise _exceptions.SttyExecutionError(
                result.stderr.strip(), command=command, stderr=result.stderr
            )

        code, size = result.returncode, len(result.stdout)
        log.debug("stty exited %d (%db output)", code, size)
        return result.stdout

    def run_tokens(self, tokens: Iterable[str]) -> str:
        return self.run(shlex.join(tokens))
