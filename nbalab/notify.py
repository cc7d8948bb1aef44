"""Sending a notification through an external script."""

from __future__ import annotations

import subprocess
import sys


def _shell_single_quote(message: str) -> str:
    return "'" + message.replace("'", "'\\''") + "'"


def send(message: str, script_path: str = "./notify.sh") -> int | None:
    """Run ``script_path`` through the shell with ``message`` as its single argument.

    Returns the command's exit status, or None when the message is empty.
    A non-zero status is reported on stderr.
    """
    if not message:
        return None
    command = f"{script_path} {_shell_single_quote(message)}"
    status = subprocess.run(command, shell=True, check=False).returncode
    if status != 0:
        print(f"notify.send: command returned {status}: {command}", file=sys.stderr)
    return status