from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Callable, Tuple

from . import codec
from .errors import Aborted, StoreIOError
from .log import get_logger
from .model import Table, Tags

log = get_logger(__name__)

STORE_FILENAME = "data.json"


def default_store_path() -> Path:
    base = os.getenv("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return Path(base).expanduser() / "sbm" / STORE_FILENAME


def load_store(path: Path, *, confirm: Callable[[str], bool]) -> Tuple[Tags, Table]:
    path = Path(path).expanduser()
    if not path.exists():
        if not confirm(f"Could not find '{path}'. Create a new store?"):
            raise Aborted(f"No store at {path}.")
        tags, table = Tags(), Table()
        save_store(path, tags, table)
        log.info("Created empty store: %s", path)
        return tags, table

    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise StoreIOError(f"Could not read store {path}: {e}") from e
    tags, table = codec.loads(text)
    log.debug("Loaded %d tags and %d bookmarks from %s", len(tags), len(table), path)
    return tags, table


def save_store(path: Path, tags: Tags, table: Table) -> None:
    path = Path(path).expanduser()
    text = codec.dumps(tags, table)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        _atomic_write(path, text)
    except OSError as e:
        raise StoreIOError(f"Could not save store {path}: {e}") from e
    log.debug("Saved %d tags and %d bookmarks to %s", len(tags), len(table), path)


def _atomic_write(path: Path, text: str) -> None:
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise
