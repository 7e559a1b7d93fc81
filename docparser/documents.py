"""Documents compose patterns; document sets try alternative documents."""
from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass

from .errors import DocParserError, DocumentFailed, ErrorList
from .fields import Fields
from .patterns import Pattern, search_pattern

logger = logging.getLogger(__name__)


@dataclass(frozen=True, init=False)
class Document:
    """Collection of patterns.

    Each pattern extracts a subset of the fields from the content and the
    document fields are the sum of those extractions, later patterns
    overriding earlier ones on shared keys. A document is a pattern itself,
    so documents can be nested.
    """

    patterns: tuple[Pattern, ...]
    name: str

    def __init__(self, patterns: Iterable[Pattern], name: str = "") -> None:
        patterns = tuple(patterns)
        for pattern in patterns:
            if not isinstance(pattern, Pattern):
                raise TypeError(f"not a pattern: {pattern!r}")
        object.__setattr__(self, "patterns", patterns)
        object.__setattr__(self, "name", name)

    def __iter__(self) -> Iterator[Pattern]:
        return iter(self.patterns)

    def __len__(self) -> int:
        return len(self.patterns)

    def search(self, content: str) -> Fields:
        return self.search_with_context(content, {})

    def search_with_context(self, content: str, context: Mapping[str, object]) -> Fields:
        fields = Fields()
        for pattern in self.patterns:
            scope = {**context, **fields}
            fields.update(search_pattern(pattern, content, scope))
        return fields


@dataclass(frozen=True, init=False)
class DocumentSet:
    """Alternative documents for content that comes in several formats."""

    documents: tuple[Document, ...]

    def __init__(self, documents: Iterable[Document]) -> None:
        object.__setattr__(self, "documents", tuple(documents))

    def __iter__(self) -> Iterator[Document]:
        return iter(self.documents)

    def __len__(self) -> int:
        return len(self.documents)

    def search(self, content: str) -> Fields:
        """Return the fields of the first document that matches ``content``.

        Every document is tried once, in order. If all of them fail an
        ``ErrorList`` with one entry per document is raised.
        """

        return self.search_with_context(content, {})

    def search_with_context(self, content: str, context: Mapping[str, object]) -> Fields:
        errors = ErrorList()
        for index, document in enumerate(self.documents):
            try:
                fields = document.search_with_context(content, context)
            except DocParserError as exc:
                logger.debug("Document %d (%s) failed: %s", index, document.name or "-", exc)
                errors.add(DocumentFailed(index, exc))
                continue
            logger.debug("Document %d (%s) matched", index, document.name or "-")
            return fields
        raise errors

