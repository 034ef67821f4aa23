from __future__ import annotations

import sys
from typing import Callable, Optional, TextIO

YES_ANSWERS = ("y", "yes")


def confirm(question: str, *, stdin: Optional[TextIO] = None, stdout: Optional[TextIO] = None) -> bool:
    """Ask a yes/no question on the terminal. Anything but y/yes, including EOF, is no."""
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout
    stdout.write(f"{question} [y/N] ")
    stdout.flush()
    answer = stdin.readline()
    return answer.strip().lower() in YES_ANSWERS


def always_yes(_question: str) -> bool:
    return True


def make_confirm(assume_yes: bool) -> Callable[[str], bool]:
    return always_yes if assume_yes else confirm
