"""Pattern implementations that extract fields from text with regexes."""
from __future__ import annotations

import logging
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from .errors import NoMatch
from .fields import Fields

logger = logging.getLogger(__name__)

Cleaner = Callable[[Fields], Fields]

TEMPLATE_FIELD_RE = re.compile(r"\{(?P<field>[A-Za-z_][A-Za-z0-9_]*)\}")


@runtime_checkable
class Pattern(Protocol):
    """Anything that can extract ``Fields`` from a text."""

    def search(self, content: str) -> Fields:
        ...


@runtime_checkable
class ContextPattern(Pattern, Protocol):
    """Pattern that also reads the fields found so far by its ``Document``."""

    def search_with_context(self, content: str, context: Mapping[str, object]) -> Fields:
        ...


def search_pattern(pattern: Pattern, content: str, context: Mapping[str, object]) -> Fields:
    if isinstance(pattern, ContextPattern):
        return pattern.search_with_context(content, context)
    return pattern.search(content)


def compile_regex(regex: str | re.Pattern[str]) -> re.Pattern[str]:
    if isinstance(regex, re.Pattern):
        return regex
    return re.compile(regex)


def regex_groups(regex: re.Pattern[str], content: str) -> Fields | None:
    """Extract all named groups of ``regex`` from ``content``.

    Returns ``None`` when the regex doesn't match. Groups that did not
    take part in the match are stored as empty strings.
    """

    match = regex.search(content)
    if match is None:
        return None
    return Fields(
        (name, value if value is not None else "")
        for name, value in match.groupdict().items()
    )


def split_text(regex: re.Pattern[str], text: str) -> list[str]:
    """Split ``text`` on every match of ``regex``.

    Unlike ``re.split`` capturing groups of the delimiter are not included
    in the output. Follows Go's ``regexp.Split``: empty segments are kept, so
    item indexes in ``PatternList`` errors count them.
    """

    parts: list[str] = []
    begin = end = 0
    for match in regex.finditer(text):
        end = match.start()
        # an empty match at the very start doesn't produce a leading item
        if match.end() != 0:
            parts.append(text[begin:end])
        begin = match.end()
    if end != len(text):
        parts.append(text[begin:])
    return parts


@dataclass(frozen=True)
class PatternGroup:
    """Single regex with named groups extracting one or more fields.

    ``name`` identifies the pattern in errors and logs. ``clean`` receives
    the extracted fields and returns the cleaned version. With ``optional``
    set a regex that doesn't match yields empty fields instead of
    ``NoMatch``.
    """

    name: str
    regex: re.Pattern[str]
    clean: Cleaner | None = None
    optional: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "regex", compile_regex(self.regex))

    def search(self, content: str) -> Fields:
        return _search_group(self.name, self.regex, content, self.clean, self.optional)


@dataclass(frozen=True)
class TemplatePatternGroup:
    """``PatternGroup`` whose regex references previously extracted fields.

    Each ``{field}`` placeholder in ``regex_template`` is replaced with the
    escaped value of ``field`` from the search context before matching, so
    a later pattern in a ``Document`` can anchor on what an earlier one
    found::

        TemplatePatternGroup(
            name="Email",
            regex_template=r"My name and email {name}(?P<email>.*)\\n",
        )

    A placeholder without a value in the context is treated as a miss.
    """

    name: str
    regex_template: str
    clean: Cleaner | None = None
    optional: bool = False

    def __post_init__(self) -> None:
        # placeholders always render to a non-empty literal
        re.compile(TEMPLATE_FIELD_RE.sub("_", self.regex_template))

    def render(self, context: Mapping[str, object]) -> str | None:
        missing: list[str] = []

        def substitute(match: re.Match[str]) -> str:
            value = context.get(match.group("field"))
            if not isinstance(value, str) or not value:
                missing.append(match.group("field"))
                return match.group(0)
            return re.escape(value)

        rendered = TEMPLATE_FIELD_RE.sub(substitute, self.regex_template)
        if missing:
            logger.debug("Template %r is missing fields: %s", self.name, ", ".join(missing))
            return None
        return rendered

    def search(self, content: str) -> Fields:
        return self.search_with_context(content, {})

    def search_with_context(self, content: str, context: Mapping[str, object]) -> Fields:
        rendered = self.render(context)
        if rendered is None:
            if self.optional:
                return Fields()
            raise NoMatch(self.name, content)
        return _search_group(self.name, re.compile(rendered), content, self.clean, self.optional)


@dataclass(frozen=True)
class PatternList:
    """Pattern that finds a list of items in the content.

    ``list_regex`` locates the block holding the list and must have exactly
    one named group: its value is the list text and its name is the key of
    the result. ``split_regex`` breaks the list text into items and
    ``item_regex`` extracts the fields of each item. The result has a
    single key::

        Fields({
            "items": [
                Fields({"key": "item1"}),
                Fields({"key": "item2"}),
            ]
        })

    ``optional`` only covers ``list_regex``: once the list is found every
    item has to match ``item_regex``.
    """

    name: str
    list_regex: re.Pattern[str]
    split_regex: re.Pattern[str]
    item_regex: re.Pattern[str]
    clean_item: Cleaner | None = None
    optional: bool = False

    def __post_init__(self) -> None:
        for attr in ("list_regex", "split_regex", "item_regex"):
            object.__setattr__(self, attr, compile_regex(getattr(self, attr)))
        group_names = list(self.list_regex.groupindex)
        if len(group_names) != 1:
            raise ValueError(
                f"{self.name}: list regex must have exactly one named group, "
                f"found {len(group_names)}"
            )

    @property
    def list_name(self) -> str:
        return next(iter(self.list_regex.groupindex))

    def search(self, content: str) -> Fields:
        match = self.list_regex.search(content)
        if match is None:
            if self.optional:
                logger.debug("Optional list %r not found", self.name)
                return Fields()
            raise NoMatch(f"{self.name} - list regex", content)

        list_name = self.list_name
        list_text = match.group(list_name) or ""
        items: list[Fields] = []
        for index, item_text in enumerate(split_text(self.split_regex, list_text)):
            if not item_text:
                continue
            fields = regex_groups(self.item_regex, item_text)
            if fields is None:
                raise NoMatch(f"{self.name} - item {index}", item_text)
            if self.clean_item is not None:
                fields = self.clean_item(fields)
            items.append(fields)
        return Fields({list_name: items})


def _search_group(
    name: str,
    regex: re.Pattern[str],
    content: str,
    clean: Cleaner | None,
    optional: bool,
) -> Fields:
    fields = regex_groups(regex, content)
    if fields is None:
        if optional:
            logger.debug("Optional pattern %r did not match", name)
            return Fields()
        raise NoMatch(name, content)
    if clean is not None:
        fields = clean(fields)
    return fields
