from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterator, List, Optional

from .errors import NotFound, ValidationError
from .strutil import equals_ci, is_digits, truncate

ROW_TAG_SLOTS = 8
TITLE_MAX = 63
COMMENT_MAX = 255
TAG_NAME_MAX = 31

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
RESERVED_TAG_NAMES = ("add", "update", "rename", "remove")


def now_local() -> datetime:
    return datetime.now().replace(microsecond=0)


def format_timestamp(dt: datetime) -> str:
    return dt.strftime(TIMESTAMP_FORMAT)


def parse_timestamp(s: str) -> datetime:
    # Raises ValueError; the codec turns that into a DecodeError.
    return datetime.strptime(s, TIMESTAMP_FORMAT)


def empty_slots() -> List[int]:
    return [0] * ROW_TAG_SLOTS


@dataclass
class Row:
    id: int
    url: str
    title: str = ""
    comment: str = ""
    tag_ids: List[int] = field(default_factory=empty_slots)
    last_updated: datetime = field(default_factory=now_local)

    def has_tag(self, tag_id: int) -> bool:
        return tag_id != 0 and tag_id in self.tag_ids

    def free_slot(self) -> Optional[int]:
        for i, tid in enumerate(self.tag_ids):
            if tid == 0:
                return i
        return None

    def live_tag_ids(self) -> List[int]:
        return [tid for tid in self.tag_ids if tid != 0]

    def touch(self, when: datetime) -> None:
        self.last_updated = when.replace(microsecond=0)


@dataclass
class Tag:
    id: int
    name: str


def normalize_tag_name(name: str) -> str:
    """Validate a user-supplied tag name and return its stored form."""
    name = name.strip().replace(" ", "-")
    if not name:
        raise ValidationError("Tag names cannot be empty.")
    if name[0].isdigit():
        raise ValidationError(f"Invalid tag name '{name}'. Tag names cannot start with a number.")
    if any(equals_ci(name, kw) for kw in RESERVED_TAG_NAMES):
        raise ValidationError(f"Invalid tag name '{name}'. Tag names cannot be set to reserved terms.")
    return truncate(name, TAG_NAME_MAX)


class Table:
    """Bookmark rows keyed by id, in insertion order."""

    def __init__(self, next_id: int = 1):
        self.rows: Dict[int, Row] = {}
        self.next_id = max(1, next_id)

    def __iter__(self) -> Iterator[Row]:
        return iter(list(self.rows.values()))

    def __len__(self) -> int:
        return len(self.rows)

    def __contains__(self, row_id: object) -> bool:
        return row_id in self.rows

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Table):
            return NotImplemented
        return self.next_id == other.next_id and list(self.rows.items()) == list(other.rows.items())

    def __repr__(self) -> str:
        return f"Table(rows={len(self.rows)}, next_id={self.next_id})"

    def get(self, row_id: int) -> Row:
        row = self.rows.get(row_id)
        if row is None:
            raise NotFound(f"Bookmark {row_id} could not be found.")
        return row

    def add(
        self,
        url: str,
        *,
        title: str = "",
        comment: str = "",
        tag_ids: Optional[List[int]] = None,
        when: Optional[datetime] = None,
    ) -> Row:
        slots = empty_slots()
        for i, tid in enumerate(tag_ids or []):
            if i >= ROW_TAG_SLOTS:
                raise ValidationError(f"A bookmark can hold at most {ROW_TAG_SLOTS} tags.")
            slots[i] = tid
        row = Row(
            id=self.next_id,
            url=url,
            title=truncate(title, TITLE_MAX),
            comment=truncate(comment, COMMENT_MAX),
            tag_ids=slots,
            last_updated=(when or now_local()).replace(microsecond=0),
        )
        self.rows[row.id] = row
        self.next_id += 1
        return row

    def insert(self, row: Row) -> None:
        """Place a row under its own id (used when loading the store)."""
        if row.id < 1:
            raise ValueError(f"row id must be positive, got {row.id}")
        if row.id in self.rows:
            raise ValueError(f"duplicate row id {row.id}")
        self.rows[row.id] = row
        self.next_id = max(self.next_id, row.id + 1)

    def remove(self, row_id: int) -> Row:
        row = self.get(row_id)
        del self.rows[row_id]
        return row


class Tags:
    """Tag registry keyed by id, in insertion order."""

    def __init__(self, next_id: int = 1):
        self.tags: Dict[int, Tag] = {}
        self.next_id = max(1, next_id)

    def __iter__(self) -> Iterator[Tag]:
        return iter(list(self.tags.values()))

    def __len__(self) -> int:
        return len(self.tags)

    def __contains__(self, tag_id: object) -> bool:
        return tag_id in self.tags

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Tags):
            return NotImplemented
        return self.next_id == other.next_id and list(self.tags.items()) == list(other.tags.items())

    def __repr__(self) -> str:
        return f"Tags(tags={len(self.tags)}, next_id={self.next_id})"

    def get(self, tag_id: int) -> Tag:
        tag = self.tags.get(tag_id)
        if tag is None:
            raise NotFound(f"Tag {tag_id} could not be found.")
        return tag

    def name_of(self, tag_id: int) -> Optional[str]:
        tag = self.tags.get(tag_id)
        return tag.name if tag else None

    def find_by_name(self, name: str) -> Optional[Tag]:
        for tag in self.tags.values():
            if equals_ci(tag.name, name):
                return tag
        return None

    def resolve(self, token: str) -> Tag:
        """An all-digit token is an id; anything else is a case-insensitive name."""
        token = token.strip()
        if is_digits(token):
            return self.get(int(token))
        tag = self.find_by_name(token.replace(" ", "-"))
        if tag is None:
            raise NotFound(f"Could not find tag '{token}'.")
        return tag

    def add(self, name: str) -> Tag:
        tag = Tag(id=self.next_id, name=normalize_tag_name(name))
        self.tags[tag.id] = tag
        self.next_id += 1
        return tag

    def insert(self, tag: Tag) -> None:
        if tag.id < 1:
            raise ValueError(f"tag id must be positive, got {tag.id}")
        if tag.id in self.tags:
            raise ValueError(f"duplicate tag id {tag.id}")
        self.tags[tag.id] = tag
        self.next_id = max(self.next_id, tag.id + 1)

    def remove(self, tag_id: int) -> Tag:
        tag = self.get(tag_id)
        del self.tags[tag_id]
        return tag
