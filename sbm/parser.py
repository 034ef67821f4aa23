"""Command tokens -> typed operations.

Two grammars share the command line::

    add <url> [-c comment] [-t title] [-tg tags]
    update <id> [-c comment] [-t title] [-tg tags]
    remove <id> | open <id>
    list <term|all> | list -tg <tags>

    tag add <name> | tag rename <tag> <new-name> | tag remove <tag> | tag list all
    tag <row-id> <tag>
"""

from __future__ import annotations

from typing import Dict, List, Sequence

from .errors import ValidationError
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
from .strutil import is_digits

ENTRY_VERBS = ("add", "update", "remove", "open", "list")
FLAG_FIELDS = {"-c": "comment", "-t": "title", "-tg": "tags"}
TAG_FLAG = "-tg"

MAX_ENTRY_ARGS = 8
MIN_TAG_ARGS = 2
MAX_TAG_ARGS = 3

_TAG_ARITY = {"add": 1, "rename": 2, "remove": 1, "list": 1}

_NO_QUOTES_HINT = 'Perhaps you did not enclose a value with "".'


def parse_args(tokens: Sequence[str]) -> Operation:
    tokens = list(tokens)
    if not tokens:
        raise ValidationError("No command given.")
    verb, rest = tokens[0], tokens[1:]
    if verb == "tag":
        return _parse_tag(rest)
    if verb in ENTRY_VERBS:
        return _parse_entry(verb, rest)
    raise ValidationError(f"Unknown command '{verb}'.")


def _parse_entry(verb: str, args: List[str]) -> Operation:
    if not args:
        raise ValidationError(f"'{verb}' needs an argument.")
    if len(args) > MAX_ENTRY_ARGS:
        raise ValidationError(f"Too many args. {_NO_QUOTES_HINT}")

    if verb == "add":
        url = args[0]
        if not url.strip() or url in FLAG_FIELDS:
            raise ValidationError("Attempting to add a new URL but no URL provided.")
        return AddBookmark(url=url, **_parse_flags(args[1:]))

    if verb == "update":
        row_id = _parse_row_id(args[0], verb)
        fields = _parse_flags(args[1:])
        if not fields:
            raise ValidationError("Nothing to update. Give at least one of -c, -t or -tg.")
        return UpdateBookmark(id=row_id, **fields)

    if verb in ("remove", "open"):
        if len(args) != 1:
            raise ValidationError(f"'{verb}' takes exactly one bookmark id.")
        row_id = _parse_row_id(args[0], verb)
        return RemoveBookmark(id=row_id) if verb == "remove" else OpenBookmark(id=row_id)

    if args[0].lower() == TAG_FLAG:
        if len(args) < 2:
            raise ValidationError(f"Has option flag '{TAG_FLAG}' but no value given.")
        return ListBookmarksByTag(tags=" ".join(args[1:]))
    if len(args) != 1:
        raise ValidationError(f"'list' takes one search term or {TAG_FLAG} <tags>. {_NO_QUOTES_HINT}")
    return ListBookmarks(term=args[0])


def _parse_flags(args: List[str]) -> Dict[str, str]:
    fields: Dict[str, str] = {}
    i = 0
    while i < len(args):
        flag = args[i]
        if flag not in FLAG_FIELDS:
            if flag.startswith("-"):
                raise ValidationError(f"Unknown option '{flag}'.")
            raise ValidationError(f"Unexpected argument '{flag}'. {_NO_QUOTES_HINT}")
        if i + 1 >= len(args):
            raise ValidationError(f"Has option flag '{flag}' but no value given.")
        fields[FLAG_FIELDS[flag]] = args[i + 1]
        i += 2
    return fields


def _parse_tag(args: List[str]) -> Operation:
    if len(args) < MIN_TAG_ARGS:
        raise ValidationError("Too few args for interacting with tags.")
    if len(args) > MAX_TAG_ARGS:
        raise ValidationError(f"Too many args for interacting with tags. {_NO_QUOTES_HINT}")

    verb, rest = args[0], args[1:]
    arity = _TAG_ARITY.get(verb)
    if arity is None:
        if len(args) != 2:
            raise ValidationError("Tagging a bookmark takes a bookmark id and one tag.")
        return AddTagToEntry(row_id=_parse_row_id(args[0], "tag"), tag=args[1])

    if len(rest) != arity:
        raise ValidationError(f"'tag {verb}' takes {arity} argument{'s' if arity > 1 else ''}.")
    if verb == "add":
        return AddTag(name=rest[0])
    if verb == "rename":
        return RenameTag(target=rest[0], new_name=rest[1])
    if verb == "remove":
        return RemoveTag(target=rest[0])
    return ListTags(term=rest[0])


def _parse_row_id(token: str, verb: str) -> int:
    if not is_digits(token) or int(token) < 1:
        raise ValidationError(f"Arg 1 of '{verb}' must be a bookmark id, got '{token}'.")
    return int(token)
