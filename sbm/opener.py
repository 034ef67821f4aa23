from __future__ import annotations

import shlex
import subprocess
import sys
from typing import List, Optional

from .log import get_logger

log = get_logger(__name__)

# Exit status reported when the launcher itself cannot be started.
LAUNCH_FAILED = 127


def launcher_command(url: str, command: Optional[str] = None) -> List[str]:
    if command:
        return shlex.split(command) + [url]
    if sys.platform == "darwin":
        return ["open", url]
    if sys.platform.startswith("win"):
        return ["cmd", "/c", "start", "", url]
    return ["xdg-open", url]


def open_url(url: str, *, command: Optional[str] = None) -> int:
    """Hand ``url`` to the desktop's default handler and return the launcher's exit status."""
    cmd = launcher_command(url, command)
    log.debug("Running %s", cmd)
    try:
        r = subprocess.run(cmd, stdout=subprocess.DEVNULL, stderr=subprocess.PIPE, text=True)
    except OSError as e:
        log.warning("Could not start %s: %s", cmd[0], e)
        return LAUNCH_FAILED
    if r.returncode != 0 and r.stderr:
        log.debug("%s stderr: %s", cmd[0], r.stderr.strip())
    return r.returncode
