from __future__ import annotations

from email.message import EmailMessage
from pathlib import Path

import pytest
from docx import Document as DocxDocument
from pypdf import PdfWriter

import docparser
from docparser import Document, NoMatch, PatternGroup, loaders


@pytest.fixture()
def contact() -> Document:
    return Document(
        [
            PatternGroup(name="Name", regex=r"Name: (?P<name>.*)"),
            PatternGroup(name="Email", regex=r"Email: (?P<email>\S+)"),
        ]
    )


@pytest.fixture()
def inbox(tmp_path: Path) -> Path:
    root = tmp_path / "inbox"
    (root / "archive").mkdir(parents=True)
    (root / "lead.txt").write_text("Name: Bob\nEmail: bob@site.com\n", encoding="utf-8")
    (root / "archive" / "newsletter.md").write_text("# Weekly news\n", encoding="utf-8")
    (root / "contacts.csv").write_text("name,email\n", encoding="utf-8")
    return root


def test_load_plain_text(tmp_path: Path) -> None:
    path = tmp_path / "lead.txt"
    path.write_text("Name: Bob\n", encoding="utf-8")
    assert loaders.load_text(path) == "Name: Bob\n"


def test_load_html(tmp_path: Path) -> None:
    path = tmp_path / "lead.html"
    path.write_text(
        "<html><head><title>Lead</title></head>"
        "<body><p>Name: Bob</p><p>Email: <b>bob@site.com</b></p></body></html>",
        encoding="utf-8",
    )
    assert loaders.load_text(path) == "Name: Bob\nEmail: bob@site.com\n"


def test_load_email_prefers_plain_text(tmp_path: Path) -> None:
    message = EmailMessage()
    message["Subject"] = "New lead"
    message.set_content("Name: Bob\nEmail: bob@site.com\n")
    message.add_alternative("<p>Name: Someone else</p>", subtype="html")
    path = tmp_path / "lead.eml"
    path.write_bytes(bytes(message))
    text = loaders.load_text(path)
    assert "Name: Bob" in text
    assert "Someone else" not in text


def test_load_html_email(tmp_path: Path) -> None:
    message = EmailMessage()
    message.set_content("<p>Name: Bob</p><p>Email: bob@site.com</p>", subtype="html")
    path = tmp_path / "lead.eml"
    path.write_bytes(bytes(message))
    assert loaders.load_text(path) == "Name: Bob\nEmail: bob@site.com\n"


def test_load_docx(tmp_path: Path, contact: Document) -> None:
    document = DocxDocument()
    document.add_paragraph("Name: Bob")
    document.add_paragraph("Email: bob@site.com")
    path = tmp_path / "lead.docx"
    document.save(str(path))
    fields = contact.search(loaders.load_text(path))
    assert fields == {"name": "Bob", "email": "bob@site.com"}


def test_load_unsupported(tmp_path: Path) -> None:
    path = tmp_path / "contacts.csv"
    path.write_text("name,email\n", encoding="utf-8")
    with pytest.raises(ValueError):
        loaders.load_text(path)


def test_search_file_wrapper(inbox: Path, contact: Document) -> None:
    fields = docparser.search_file(inbox / "lead.txt", contact)
    assert fields.get_string("email") == "bob@site.com"
    with pytest.raises(NoMatch):
        docparser.search_file(inbox / "archive" / "newsletter.md", contact)


def test_search_file_statuses(inbox: Path, contact: Document) -> None:
    matched = loaders.search_file(inbox / "lead.txt", contact, base_path=inbox)
    assert matched.matched
    assert matched.file == "lead.txt"
    assert matched.fields.get_string("name") == "Bob"
    assert len(matched.sha256) == 64

    missed = loaders.search_file(inbox / "archive" / "newsletter.md", contact, base_path=inbox)
    assert missed.status == "no_match"
    assert missed.error == 'No match for "Name"'
    assert missed.fields == {}

    failed = loaders.search_file(inbox / "contacts.csv", contact, base_path=inbox)
    assert failed.status == "error"
    assert failed.error is not None

    unreadable = loaders.search_file(inbox / "gone.txt", contact)
    assert unreadable.status == "error"
    assert unreadable.sha256 == ""


def test_scan_directory(inbox: Path, contact: Document) -> None:
    results = loaders.scan_directory(inbox, contact)
    assert sorted(results) == ["archive/newsletter.md", "lead.txt"]
    assert results["lead.txt"].status == "matched"
    assert results["archive/newsletter.md"].status == "no_match"


def test_result_to_dict(inbox: Path, contact: Document) -> None:
    result = loaders.search_file(inbox / "lead.txt", contact, base_path=inbox)
    data = result.to_dict()
    assert data["status"] == "matched"
    assert data["fields"] == {"name": "Bob", "email": "bob@site.com"}
    assert data["error"] is None


class FakePage:
    def __init__(self, text: str | None) -> None:
        self.text = text

    def extract_text(self) -> str | None:
        return self.text


def test_load_pdf_joins_pages(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path, contact: Document
) -> None:
    class FakeReader:
        def __init__(self, path: str) -> None:
            self.pages = [FakePage("Name: Bob"), FakePage(None), FakePage("Email: bob@site.com")]

    monkeypatch.setattr(loaders, "PdfReader", FakeReader)
    path = tmp_path / "lead.pdf"
    path.write_bytes(b"%PDF-1.4\n")
    assert loaders.load_text(path) == "Name: Bob\n\nEmail: bob@site.com"
    assert loaders.search_file(path, contact).matched


def test_blank_pdf_does_not_match(tmp_path: Path, contact: Document) -> None:
    writer = PdfWriter()
    writer.add_blank_page(width=612, height=792)
    path = tmp_path / "blank.pdf"
    with path.open("wb") as fh:
        writer.write(fh)
    result = loaders.search_file(path, contact, base_path=tmp_path)
    assert result.status == "no_match"
    assert result.file == "blank.pdf"
