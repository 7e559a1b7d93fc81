"""Parse semi-structured documents using regexes.

A semi-structured document is any text that doesn't follow a strict
syntax, like YAML, but where regexes can still find specific values,
automated email messages being the typical case.
"""
from __future__ import annotations

from pathlib import Path

from . import documents, errors, fields, loaders, patterns
from .documents import Document, DocumentSet
from .errors import DocParserError, DocumentFailed, ErrorList, NoMatch
from .fields import Fields
from .patterns import ContextPattern, Pattern, PatternGroup, PatternList, TemplatePatternGroup

__all__ = [
    "documents",
    "errors",
    "fields",
    "loaders",
    "patterns",
    "DocParserError",
    "Document",
    "DocumentFailed",
    "DocumentSet",
    "ContextPattern",
    "ErrorList",
    "Fields",
    "NoMatch",
    "Pattern",
    "PatternGroup",
    "PatternList",
    "TemplatePatternGroup",
    "search_file",
]


def search_file(path: str | Path, pattern: Pattern) -> Fields:
    """Convenience wrapper: load ``path`` and search it with ``pattern``.

    Raises ``NoMatch``/``ErrorList`` like ``pattern.search()`` does.
    """

    return pattern.search(loaders.load_text(path))
