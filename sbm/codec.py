"""JSON document <-> in-memory tables.

Document layout::

    {
        "tags": {"<tag id>": "<name>", ...},
        "rows": {"<row id>": [url, title, comment, "YYYY-MM-DD HH:MM:SS", ["<tag id>", ... x8]], ...}
    }

``tags`` must come before ``rows`` and nothing else may appear at the top
level. Row fields are positional.
"""

from __future__ import annotations

import json
import re
from typing import Any, Dict, List, Tuple

from .errors import DecodeError
from .model import (
    COMMENT_MAX,
    ROW_TAG_SLOTS,
    TAG_NAME_MAX,
    TITLE_MAX,
    Row,
    Table,
    Tag,
    Tags,
    empty_slots,
    format_timestamp,
    parse_timestamp,
)
from .strutil import is_digits, truncate

TOP_LEVEL_KEYS = ["tags", "rows"]
ROW_FIELDS = 5

# Zero-padded, exactly as format_timestamp writes it.
_STAMP_RE = re.compile(r"\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}")


def loads(text: str) -> Tuple[Tags, Table]:
    try:
        doc = json.loads(text, object_pairs_hook=_unique_keys)
    except json.JSONDecodeError as e:
        raise DecodeError(f"Store is not valid JSON: {e}") from e
    return decode_document(doc)


def dumps(tags: Tags, table: Table) -> str:
    return json.dumps(encode_document(tags, table), indent="\t", ensure_ascii=False) + "\n"


def decode_document(doc: Any) -> Tuple[Tags, Table]:
    if not isinstance(doc, dict):
        raise DecodeError("Store must be a JSON object.")
    if list(doc.keys()) != TOP_LEVEL_KEYS:
        raise DecodeError(f"Store must hold exactly the keys {TOP_LEVEL_KEYS} in that order, got {list(doc.keys())}.")

    raw_tags, raw_rows = doc["tags"], doc["rows"]
    if not isinstance(raw_tags, dict):
        raise DecodeError("'tags' must be an object.")
    if not isinstance(raw_rows, dict):
        raise DecodeError("'rows' must be an object.")

    tags = Tags()
    for key, name in raw_tags.items():
        tag_id = _decode_id(key, "tag")
        if not isinstance(name, str):
            raise DecodeError(f"tag {key}: name must be a string.")
        try:
            tags.insert(Tag(id=tag_id, name=truncate(name, TAG_NAME_MAX)))
        except ValueError as e:
            raise DecodeError(f"tag {key}: {e}") from e

    table = Table()
    for key, value in raw_rows.items():
        try:
            table.insert(_decode_row(key, value))
        except ValueError as e:
            raise DecodeError(f"row {key}: {e}") from e
    return tags, table


def encode_document(tags: Tags, table: Table) -> Dict[str, Dict[str, Any]]:
    return {
        "tags": {str(t.id): t.name for t in tags},
        "rows": {str(r.id): _encode_row(r) for r in table},
    }


def _encode_row(row: Row) -> List[Any]:
    slots = (list(row.tag_ids) + empty_slots())[:ROW_TAG_SLOTS]
    return [
        row.url,
        row.title,
        row.comment,
        format_timestamp(row.last_updated),
        [str(tid) for tid in slots],
    ]


def _decode_row(key: str, value: Any) -> Row:
    row_id = _decode_id(key, "row")
    if not isinstance(value, list) or len(value) != ROW_FIELDS:
        raise DecodeError(f"row {key}: expected an array of {ROW_FIELDS} fields.")

    url, title, comment, stamp, raw_slots = value
    for field_name, v in (("url", url), ("title", title), ("comment", comment), ("last_updated", stamp)):
        if not isinstance(v, str):
            raise DecodeError(f"row {key}: {field_name} must be a string.")
    if not _STAMP_RE.fullmatch(stamp):
        raise DecodeError(f"row {key}: date and time {stamp!r} is not in YYYY-MM-DD HH:MM:SS form.")
    try:
        last_updated = parse_timestamp(stamp)
    except ValueError as e:
        raise DecodeError(f"row {key}: could not parse date and time {stamp!r}.") from e

    return Row(
        id=row_id,
        url=url,
        title=truncate(title, TITLE_MAX),
        comment=truncate(comment, COMMENT_MAX),
        tag_ids=_decode_slots(key, raw_slots),
        last_updated=last_updated,
    )


def _decode_slots(key: str, raw_slots: Any) -> List[int]:
    if not isinstance(raw_slots, list):
        raise DecodeError(f"row {key}: tag ids must be an array.")
    if len(raw_slots) > ROW_TAG_SLOTS:
        raise DecodeError(f"row {key}: more than {ROW_TAG_SLOTS} tag ids.")
    slots = empty_slots()
    seen = set()
    for i, s in enumerate(raw_slots):
        if not isinstance(s, str) or not _is_canonical_int(s):
            raise DecodeError(f"row {key}: tag id {s!r} is not a decimal string without leading zeros.")
        tid = int(s)
        if tid:
            if tid in seen:
                raise DecodeError(f"row {key}: tag id {tid} appears twice.")
            seen.add(tid)
        slots[i] = tid
    return slots


def _decode_id(key: str, kind: str) -> int:
    if not _is_canonical_int(key) or int(key) < 1:
        raise DecodeError(f"{kind} id {key!r} is not a positive decimal integer without leading zeros.")
    return int(key)


def _is_canonical_int(s: str) -> bool:
    # "01" would be written back as "1".
    return is_digits(s) and s == str(int(s))


def _unique_keys(pairs: List[Tuple[str, Any]]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for k, v in pairs:
        if k in out:
            raise DecodeError(f"duplicate key {k!r} in store.")
        out[k] = v
    return out
