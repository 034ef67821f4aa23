from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class AddBookmark:
    url: str
    title: Optional[str] = None
    comment: Optional[str] = None
    tags: Optional[str] = None


@dataclass(frozen=True)
class UpdateBookmark:
    id: int
    title: Optional[str] = None
    comment: Optional[str] = None
    tags: Optional[str] = None


@dataclass(frozen=True)
class RemoveBookmark:
    id: int


@dataclass(frozen=True)
class OpenBookmark:
    id: int


@dataclass(frozen=True)
class ListBookmarks:
    term: str


@dataclass(frozen=True)
class ListBookmarksByTag:
    tags: str


@dataclass(frozen=True)
class AddTag:
    name: str


@dataclass(frozen=True)
class RenameTag:
    target: str
    new_name: str


@dataclass(frozen=True)
class RemoveTag:
    target: str


@dataclass(frozen=True)
class AddTagToEntry:
    row_id: int
    tag: str


@dataclass(frozen=True)
class ListTags:
    term: str


Operation = Union[
    AddBookmark,
    UpdateBookmark,
    RemoveBookmark,
    OpenBookmark,
    ListBookmarks,
    ListBookmarksByTag,
    AddTag,
    RenameTag,
    RemoveTag,
    AddTagToEntry,
    ListTags,
]
