from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, Iterator, List, Optional

from .errors import (
    Aborted,
    AlreadyTagged,
    CapacityExceeded,
    NotFound,
    OpenFailed,
    TitleFetchError,
    ValidationError,
)
from .log import get_logger
from .model import COMMENT_MAX, ROW_TAG_SLOTS, TITLE_MAX, Row, Table, Tag, Tags, normalize_tag_name, now_local
from .ops import (
    AddBookmark,
    AddTag,
    AddTagToEntry,
    ListBookmarks,
    ListBookmarksByTag,
    ListTags,
    OpenBookmark,
    Operation,
    RemoveBookmark,
    RemoveTag,
    RenameTag,
    UpdateBookmark,
)
from .render import ListedRow, Listing, listed
from .strutil import contains_ci, equals_ci, is_digits, truncate

log = get_logger(__name__)

LIST_ALL = "all"


@dataclass
class Result:
    message: Optional[str] = None
    listing: Optional[Listing] = None
    changed: bool = False


class Interpreter:
    """Applies one operation to the tag registry and bookmark table.

    Collaborators are injected so tests never touch the network, the desktop
    or the terminal:

    - ``fetch_title(url) -> str``, may raise ``TitleFetchError``; ``None``
      disables fetching
    - ``open_url(url) -> int``, the launcher's exit status
    - ``confirm(question) -> bool``
    - ``now() -> datetime``
    """

    def __init__(
        self,
        tags: Tags,
        table: Table,
        *,
        fetch_title: Optional[Callable[[str], str]],
        open_url: Callable[[str], int],
        confirm: Callable[[str], bool],
        now: Callable[[], datetime] = now_local,
        list_unique: bool = False,
    ):
        self.tags = tags
        self.table = table
        self.fetch_title = fetch_title
        self.open_url = open_url
        self.confirm = confirm
        self.now = now
        self.list_unique = list_unique
        self._handlers: Dict[type, Callable[..., Result]] = {
            AddBookmark: self._add_bookmark,
            UpdateBookmark: self._update_bookmark,
            RemoveBookmark: self._remove_bookmark,
            OpenBookmark: self._open_bookmark,
            ListBookmarks: self._list_bookmarks,
            ListBookmarksByTag: self._list_bookmarks_by_tag,
            AddTag: self._add_tag,
            RenameTag: self._rename_tag,
            RemoveTag: self._remove_tag,
            AddTagToEntry: self._add_tag_to_entry,
            ListTags: self._list_tags,
        }

    def execute(self, op: Operation) -> Result:
        handler = self._handlers.get(type(op))
        if handler is None:
            raise ValidationError(f"Invalid input: {op!r}")
        return handler(op)

    # Bookmarks

    def _add_bookmark(self, op: AddBookmark) -> Result:
        url = op.url or ""
        if not url.strip():
            raise ValidationError("Attempting to add a new URL but no URL provided.")
        tag_ids = self._resolve_tags_for_add(op.tags) if op.tags is not None else []
        title = op.title if op.title is not None else self._title_for(url)
        row = self.table.add(url, title=title, comment=op.comment or "", tag_ids=tag_ids, when=self.now())
        log.debug("Allocated row %d, next id is %d", row.id, self.table.next_id)
        return Result(message=f"Added bookmark {row.id}: {row.title or row.url}", changed=True)

    def _resolve_tags_for_add(self, tag_list: str) -> List[int]:
        ids: List[int] = []
        for token in tag_list.split():
            try:
                tag = self.tags.resolve(token)
            except NotFound:
                log.warning("Invalid tag name '%s', skipping it.", token)
                continue
            if tag.id in ids:
                log.warning("Tag '%s' given twice, skipping the repeat.", tag.name)
                continue
            ids.append(tag.id)
        if len(ids) > ROW_TAG_SLOTS:
            raise ValidationError(f"Too many tags: a bookmark holds at most {ROW_TAG_SLOTS}, got {len(ids)}.")
        return ids

    def _title_for(self, url: str) -> str:
        if self.fetch_title is None:
            log.info("Title fetching is disabled; leaving the title empty.")
            return ""
        try:
            return self.fetch_title(url)
        except TitleFetchError as e:
            log.warning("%s Leaving the title empty.", e)
            return ""

    def _update_bookmark(self, op: UpdateBookmark) -> Result:
        row = self.table.get(op.id)
        slots = list(row.tag_ids)
        if op.tags is not None:
            tokens = op.tags.split()
            if not tokens:
                raise ValidationError("Has option flag '-tg' but no tags given.")
            for token in tokens:
                tag_id = self._resolve_tag_id_in_row(token, row)
                if tag_id in slots:
                    if not self.confirm(f"Remove tag {self._tag_label(tag_id)} from row {row.id}?"):
                        raise Aborted(f"Kept tag {self._tag_label(tag_id)} on row {row.id}.")
                    slots[slots.index(tag_id)] = 0
                elif 0 in slots:
                    slots[slots.index(0)] = tag_id
                else:
                    raise CapacityExceeded(f"Cannot add any more tags to bookmark {row.id}.")

        if op.title is not None:
            row.title = truncate(op.title, TITLE_MAX)
        if op.comment is not None:
            row.comment = truncate(op.comment, COMMENT_MAX)
        row.tag_ids = slots
        if op.title is not None or op.comment is not None or op.tags is not None:
            row.touch(self.now())
        return Result(message=f"Updated bookmark {row.id}.", changed=True)

    def _resolve_tag_id_in_row(self, token: str, row: Row) -> int:
        try:
            return self.tags.resolve(token).id
        except NotFound:
            # A row may still point at a tag that no longer exists; let it be toggled off.
            if is_digits(token) and row.has_tag(int(token)):
                return int(token)
            raise

    def _tag_label(self, tag_id: int) -> str:
        name = self.tags.name_of(tag_id)
        return f"'{name}'" if name is not None else f"#{tag_id}"

    def _remove_bookmark(self, op: RemoveBookmark) -> Result:
        row = self.table.get(op.id)
        if not self.confirm(f"Delete row {row.id} entitled '{row.title}'?"):
            raise Aborted(f"Kept bookmark {row.id}.")
        self.table.remove(row.id)
        return Result(message=f"Removed bookmark {row.id}.", changed=True)

    def _open_bookmark(self, op: OpenBookmark) -> Result:
        row = self.table.get(op.id)
        status = self.open_url(row.url)
        if status != 0:
            raise OpenFailed(f"Could not open URL {row.url} (launcher exit status {status}).")
        return Result()

    def _list_bookmarks(self, op: ListBookmarks) -> Result:
        term = op.term

        def produce() -> Iterator[ListedRow]:
            show_all = equals_ci(term, LIST_ALL)
            for row in self.table:
                if show_all or contains_ci(row.title, term):
                    yield listed(row, self.tags)

        return Result(listing=Listing(produce))

    def _list_bookmarks_by_tag(self, op: ListBookmarksByTag) -> Result:
        tokens = op.tags.split()
        if not tokens:
            raise ValidationError("No tags given to list by.")
        wanted: List[int] = []
        for token in tokens:
            tag_id = self.tags.resolve(token).id
            if tag_id not in wanted:
                wanted.append(tag_id)
        unique = self.list_unique

        def produce() -> Iterator[ListedRow]:
            # Without list_unique a row appears once per requested tag it holds.
            for row in self.table:
                hits = sum(1 for tid in wanted if row.has_tag(tid))
                if unique:
                    hits = min(hits, 1)
                for _ in range(hits):
                    yield listed(row, self.tags)

        return Result(listing=Listing(produce))

    # Tags

    def _add_tag(self, op: AddTag) -> Result:
        name = normalize_tag_name(op.name)
        self._warn_duplicate_name(name)
        tag = self.tags.add(name)
        return Result(message=f"Added tag {tag.id}: {tag.name}", changed=True)

    def _rename_tag(self, op: RenameTag) -> Result:
        tag = self.tags.resolve(op.target)
        name = normalize_tag_name(op.new_name)
        self._warn_duplicate_name(name, exclude=tag)
        old = tag.name
        tag.name = name
        return Result(message=f"Renamed tag {tag.id}: {old} -> {tag.name}", changed=True)

    def _warn_duplicate_name(self, name: str, exclude: Optional[Tag] = None) -> None:
        other = self.tags.find_by_name(name)
        if other is not None and other is not exclude:
            log.warning("Tag %d is already named '%s'; names are not unique.", other.id, other.name)

    def _remove_tag(self, op: RemoveTag) -> Result:
        tag = self.tags.resolve(op.target)
        if not self.confirm(f"Remove tag '{tag.name}'?"):
            raise Aborted(f"Kept tag '{tag.name}'.")
        when = self.now()
        touched = 0
        for row in self.table:
            if row.has_tag(tag.id):
                row.tag_ids = [0 if tid == tag.id else tid for tid in row.tag_ids]
                row.touch(when)
                touched += 1
        self.tags.remove(tag.id)
        log.debug("Cleared tag %d from %d bookmarks", tag.id, touched)
        return Result(message=f"Removed tag '{tag.name}' ({touched} bookmarks untagged).", changed=True)

    def _add_tag_to_entry(self, op: AddTagToEntry) -> Result:
        tag = self.tags.resolve(op.tag)
        row = self.table.get(op.row_id)
        if row.has_tag(tag.id):
            raise AlreadyTagged(f"Bookmark {row.id} is already tagged with {tag.name}.")
        slot = row.free_slot()
        if slot is None:
            raise CapacityExceeded(f"Cannot add any more tags to bookmark {row.id}.")
        row.tag_ids[slot] = tag.id
        row.touch(self.now())
        return Result(message=f"Tagged bookmark {row.id} with {tag.name}.", changed=True)

    def _list_tags(self, op: ListTags) -> Result:
        if not equals_ci(op.term, LIST_ALL):
            raise ValidationError('Only "all" can be used to list tags.')
        return Result(listing=Listing(lambda: iter(self.tags)))
