from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, Iterable, Iterator, List, Optional, TextIO, TypeVar

from .model import Row, Tag, Tags

T = TypeVar("T")


class Listing(Generic[T]):
    """A lazy view over query results.

    Nothing is computed until iteration, and every ``iter()`` re-runs the
    query against the current tables.
    """

    def __init__(self, produce: Callable[[], Iterable[T]]):
        self._produce = produce

    def __iter__(self) -> Iterator[T]:
        return iter(self._produce())


@dataclass(frozen=True)
class ListedRow:
    row: Row
    tag_names: List[str]


def listed(row: Row, tags: Tags) -> ListedRow:
    names = []
    for tid in row.live_tag_ids():
        name = tags.name_of(tid)
        names.append(name if name is not None else f"#{tid}")
    return ListedRow(row=row, tag_names=names)


def format_row(item: ListedRow) -> str:
    lines = [f"{item.row.id:3d}. {item.row.title}", f"\t > {item.row.url}"]
    if item.row.comment:
        lines.append(f"\t # {item.row.comment}")
    if item.tag_names:
        lines.append("\t |" + "".join(f" {n} |" for n in item.tag_names))
    return "\n".join(lines)


def format_tag(tag: Tag) -> str:
    return f"{tag.id}] {tag.name}"


def print_listing(items: Iterable[object], out: TextIO) -> int:
    n = 0
    for item in items:
        if isinstance(item, ListedRow):
            print(format_row(item), file=out)
        elif isinstance(item, Tag):
            print(format_tag(item), file=out)
        else:
            print(item, file=out)
        n += 1
    return n


def print_message(message: Optional[str], out: TextIO) -> None:
    if message:
        print(message, file=out)
