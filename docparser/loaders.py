"""Load document text from files and run patterns over them."""
from __future__ import annotations

import email
import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from email import policy
from email.message import EmailMessage
from hashlib import sha256
from pathlib import Path

from bs4 import BeautifulSoup
from docx import Document as DocxDocument
from pypdf import PdfReader

from .errors import DocParserError
from .fields import Fields
from .patterns import Pattern

logger = logging.getLogger(__name__)

TEXT_EXTENSIONS = {".txt", ".md", ".markdown"}
HTML_EXTENSIONS = {".html", ".htm"}

SUPPORTED_EXTENSIONS = {
    *TEXT_EXTENSIONS,
    *HTML_EXTENSIONS,
    ".eml",
    ".pdf",
    ".docx",
}

HTML_BLOCK_TAGS = ["p", "div", "li", "tr", "br", "h1", "h2", "h3", "h4", "h5", "h6"]


@dataclass
class FileSearchResult:
    """Outcome of running a pattern over a single file."""

    file: str
    sha256: str
    status: str = "pending"
    fields: Fields = field(default_factory=Fields)
    error: str | None = None

    @property
    def matched(self) -> bool:
        return self.status == "matched"

    def to_dict(self) -> dict[str, object]:
        return {
            "file": self.file,
            "sha256": self.sha256,
            "status": self.status,
            "fields": self.fields,
            "error": self.error,
        }


def html_to_text(markup: str) -> str:
    """Render HTML as plain text with one line per block element."""

    soup = BeautifulSoup(markup, "lxml")
    for tag in soup(["script", "style", "head"]):
        tag.decompose()
    for tag in soup.find_all(HTML_BLOCK_TAGS):
        tag.insert_after("\n")
    lines = (line.strip() for line in soup.get_text().splitlines())
    return "\n".join(line for line in lines if line) + "\n"


def email_to_text(raw: bytes) -> str:
    """Body of a saved email, preferring the plain text part."""

    message = email.message_from_bytes(raw, policy=policy.default)
    assert isinstance(message, EmailMessage)
    part = message.get_body(preferencelist=("plain", "html"))
    if part is None:
        return ""
    content = part.get_content()
    if part.get_content_subtype() == "html":
        return html_to_text(content)
    return content


def docx_to_text(path: Path) -> str:
    document = DocxDocument(str(path))
    return "\n".join(paragraph.text for paragraph in document.paragraphs)


def pdf_to_text(path: Path) -> str:
    reader = PdfReader(str(path))
    return "\n".join(page.extract_text() or "" for page in reader.pages)


def load_text(path: str | Path) -> str:
    """Read the text content of ``path`` so patterns can search it."""

    path = Path(path)
    suffix = path.suffix.lower()
    if suffix in TEXT_EXTENSIONS:
        return path.read_text(encoding="utf-8", errors="ignore")
    if suffix in HTML_EXTENSIONS:
        return html_to_text(path.read_text(encoding="utf-8", errors="ignore"))
    if suffix == ".eml":
        return email_to_text(path.read_bytes())
    if suffix == ".docx":
        return docx_to_text(path)
    if suffix == ".pdf":
        return pdf_to_text(path)
    raise ValueError(f"Unsupported file type: {path}")


def iter_supported_files(root: Path) -> Iterator[Path]:
    for path in sorted(root.rglob("*")):
        if path.is_file() and path.suffix.lower() in SUPPORTED_EXTENSIONS:
            yield path


def search_file(path: Path, pattern: Pattern, *, base_path: Path | None = None) -> FileSearchResult:
    """Run ``pattern`` over the text of ``path``.

    Never raises for a file that can't be read or doesn't match; the
    outcome is reported through ``FileSearchResult.status``.
    """

    rel_file = path.relative_to(base_path).as_posix() if base_path else path.as_posix()
    try:
        raw_bytes = path.read_bytes()
    except OSError as exc:
        logger.error("Failed to read %s: %s", path, exc)
        return FileSearchResult(file=rel_file, sha256="", status="error", error=str(exc))
    result = FileSearchResult(file=rel_file, sha256=sha256(raw_bytes).hexdigest())

    try:
        text = load_text(path)
    except Exception as exc:  # parser errors vary by file type
        logger.warning("Failed to load %s: %s", path, exc)
        result.status = "error"
        result.error = str(exc)
        return result

    try:
        result.fields = pattern.search(text)
    except DocParserError as exc:
        logger.debug("No match in %s: %s", path, exc)
        result.status = "no_match"
        result.error = str(exc)
        return result
    result.status = "matched"
    return result


def scan_directory(target_dir: Path, pattern: Pattern) -> dict[str, FileSearchResult]:
    results: dict[str, FileSearchResult] = {}
    for file_path in iter_supported_files(target_dir):
        result = search_file(file_path, pattern, base_path=target_dir)
        results[result.file] = result
    matched = sum(1 for result in results.values() if result.matched)
    logger.info("Matched %d of %d files in %s", matched, len(results), target_dir)
    return results
