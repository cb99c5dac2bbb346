"""Tests for the config checker."""

import json

import pytest

from vivbook.check import ConfigChecker, check_config, is_valid_size
from vivbook.config import BookConfig


def _load(book):
    return BookConfig.load(str(book))


def _by_severity(findings, severity):
    return [f for f in findings if f.severity == severity]


def _install_theme(book, version):
    package = book / "node_modules" / "@vivliostyle" / "theme-techbook"
    package.mkdir(parents=True)
    (package / "package.json").write_text(json.dumps({"version": version}))


def test_clean_book(make_book):
    """Only the not-installed theme notice is reported for a complete book."""
    findings = check_config(_load(make_book()))
    assert _by_severity(findings, "error") == []
    assert _by_severity(findings, "warning") == []
    assert [f.subject for f in findings] == ["theme"]


def test_missing_entry_is_error(make_book):
    book = make_book()
    (book / "articles" / "00-index.md").unlink()
    errors = _by_severity(check_config(_load(book)), "error")
    assert [(e.subject, e.message) for e in errors] == [
        ("00-index.md", "not found in ./articles")
    ]


def test_missing_entry_context(make_book, escrow_data):
    book = make_book(escrow_data, files=[])
    (book / "articles").rmdir()
    errors = _by_severity(check_config(_load(book)), "error")
    assert errors[0].subject == "entryContext"


def test_duplicate_entry(make_book, escrow_data):
    escrow_data["entry"] = ["00-index.md", "01-introduction.md", "00-index.md"]
    book = make_book(escrow_data)
    errors = _by_severity(check_config(_load(book)), "error")
    assert any("more than once" in e.message for e in errors)


def test_chapter_order_warning(make_book, escrow_data):
    escrow_data["entry"] = ["00-index.md", "02-what-is-escrow.md", "01-introduction.md", "99-colophon.md"]
    book = make_book(escrow_data)
    warnings = _by_severity(check_config(_load(book)), "warning")
    assert len(warnings) == 1
    assert warnings[0].subject == "01-introduction.md"
    assert "follows 02-what-is-escrow.md" in warnings[0].message


def test_unlisted_file_is_info(make_book):
    book = make_book()
    (book / "articles" / "98-draft.md").write_text("# Draft\n")
    infos = _by_severity(check_config(_load(book)), "info")
    assert "98-draft.md" in [f.subject for f in infos]


def test_duplicate_output_path(make_book, escrow_data):
    escrow_data["output"] = [
        {"path": ".dist/book.pdf", "format": "pdf"},
        {"path": ".dist/../.dist/book.pdf", "format": "pdf"},
    ]
    errors = _by_severity(check_config(_load(make_book(escrow_data))), "error")
    assert [e.message for e in errors] == ["output path used more than once"]


def test_output_over_sources(make_book, escrow_data):
    escrow_data["output"] = [{"path": "articles", "format": "webpub"}]
    errors = _by_severity(check_config(_load(make_book(escrow_data))), "error")
    assert errors[0].message == "output would overwrite the manuscript sources"


def test_installed_theme_satisfies(make_book):
    book = make_book()
    _install_theme(book, "1.2.0")
    assert check_config(_load(book)) == []


def test_installed_theme_too_new(make_book):
    book = make_book()
    _install_theme(book, "2.0.0")
    warnings = _by_severity(check_config(_load(book)), "warning")
    assert warnings[0].subject == "theme"
    assert "does not satisfy ^1.0.1" in warnings[0].message


def test_local_theme(make_book, escrow_data):
    escrow_data["theme"] = "./themes/book.css"
    book = make_book(escrow_data)
    errors = _by_severity(check_config(_load(book)), "error")
    assert errors[0].message == "local theme './themes/book.css' not found"

    (book / "themes").mkdir()
    (book / "themes" / "book.css").write_text("@page { size: A5; }")
    assert check_config(_load(book)) == []


@pytest.mark.parametrize("size, expected", [
    ("A5", True),
    ("jis-b5", True),
    ("A4 landscape", True),
    ("148mm 210mm", True),
    ("6in 9in", True),
    ("huge", False),
    ("148mm", False),
])
def test_is_valid_size(size, expected):
    assert is_valid_size(size) is expected


def test_unknown_size_warning(make_book, escrow_data):
    escrow_data["size"] = "B6-ish"
    warnings = _by_severity(check_config(_load(make_book(escrow_data))), "warning")
    assert [w.subject for w in warnings] == ["size"]


def test_checker_run_reports(make_book, capsys):
    """Test console output and return value of ConfigChecker.run."""
    book = make_book()
    (book / "articles" / "06-escrow-cli.md").unlink()

    checker = ConfigChecker(_load(book), color=False)
    assert checker.run() is False

    out = capsys.readouterr().out
    assert "[ERROR] 06-escrow-cli.md: not found in ./articles" in out
    assert "1 errors, 1 info across 10 entries" in out
    assert "[INFO]" not in out


def test_checker_run_clean(make_book, capsys):
    book = make_book()
    _install_theme(book, "1.0.1")
    assert ConfigChecker(_load(book), color=False).run() is True
    assert "No issues found across 10 entries." in capsys.readouterr().out


def test_output_over_entry_file(make_book, escrow_data):
    escrow_data["output"] = [{"path": "articles/00-index.md", "format": "pdf"}]
    errors = _by_severity(check_config(_load(make_book(escrow_data))), "error")
    assert [(e.subject, e.message) for e in errors] == [
        ("articles/00-index.md", "output would overwrite the manuscript sources")
    ]


def test_missing_entry_context_still_checks_entry_list(make_book, escrow_data):
    """Duplicates and chapter order are reported even without the directory."""
    escrow_data["entry"] = ["00-index.md", "02-what-is-escrow.md", "01-introduction.md", "00-index.md"]
    book = make_book(escrow_data, files=[])
    (book / "articles").rmdir()

    findings = check_config(_load(book))
    errors = _by_severity(findings, "error")
    assert [e.subject for e in errors] == ["entryContext", "00-index.md"]
    assert "more than once" in errors[1].message
    warnings = _by_severity(findings, "warning")
    assert [w.subject for w in warnings] == ["01-introduction.md", "00-index.md"]
