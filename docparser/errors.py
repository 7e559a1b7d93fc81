"""Exceptions raised by pattern searches."""
from __future__ import annotations

from collections.abc import Iterable, Iterator


class DocParserError(Exception):
    """Base class for docparser failures."""


class NoMatch(DocParserError):
    """A required pattern did not match the content it was given."""

    def __init__(self, name: str, content: str) -> None:
        self.name = name
        self.content = content
        super().__init__(name, content)

    def __str__(self) -> str:
        return f'No match for "{self.name}"'


class ErrorList(DocParserError):
    """Ordered collection of failures rendered as a single message."""

    separator = "; "

    def __init__(self, errors: Iterable[BaseException] = ()) -> None:
        self.errors: list[BaseException] = list(errors)
        super().__init__(self.errors)

    def add(self, error: BaseException) -> None:
        self.errors.append(error)

    def __iter__(self) -> Iterator[BaseException]:
        return iter(self.errors)

    def __len__(self) -> int:
        return len(self.errors)

    def __str__(self) -> str:
        return self.separator.join(str(error) for error in self.errors)


class DocumentFailed(DocParserError):
    """Failure of one document inside a ``DocumentSet``."""

    def __init__(self, index: int, error: BaseException) -> None:
        self.index = index
        self.error = error
        super().__init__(index, error)

    def __str__(self) -> str:
        return f"Document {self.index}: {self.error}"
