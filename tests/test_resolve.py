"""Tests for book lookup and entry resolution."""

import os

from vivbook.config import BookConfig, OutputTarget
from vivbook.resolve import (
    discover_entries,
    entry_number,
    find_book_dir,
    missing_entries,
    natural_sort_key,
    resolve_entries,
    resolve_output,
)


def test_natural_sort_key():
    names = ["10-appendix.md", "2-setup.md", "1-intro.md"]
    assert sorted(names, key=natural_sort_key) == ["1-intro.md", "2-setup.md", "10-appendix.md"]


def test_entry_number():
    assert entry_number("03-escrow-project-setup.md") == 3
    assert entry_number("chapters/99-colophon.md") == 99
    assert entry_number("colophon.md") is None


def test_find_book_dir_by_path(make_book, tmp_path):
    book = make_book()
    assert find_book_dir(str(book), str(tmp_path)) == str(book)
    assert find_book_dir("book", str(tmp_path)) == str(book)


def test_find_book_dir_project_root(make_book, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    book = make_book()
    assert find_book_dir(".", str(book)) == str(book)


def test_find_book_dir_by_keyword(make_book, tmp_path):
    make_book(name="other-book", data={"title": "Other", "author": "A", "entry": ["a.md"]})
    book = make_book(name="solana")
    assert find_book_dir("sola", str(tmp_path)) == str(book)
    # "Escrow" only appears in the configured title
    assert find_book_dir("escrow", str(tmp_path)) == str(book)


def test_find_book_dir_not_found(make_book, tmp_path):
    make_book()
    assert find_book_dir("no-such-book", str(tmp_path)) is None


def test_resolve_entries_keeps_declared_order(make_book):
    book = make_book()
    config = BookConfig.load(str(book))
    paths = resolve_entries(config)

    assert paths[0] == os.path.join(str(book), "articles", "00-index.md")
    assert [os.path.basename(p) for p in paths] == config.entry
    assert missing_entries(config) == []


def test_missing_entries(make_book):
    book = make_book()
    (book / "articles" / "04-escrow-program.md").unlink()
    config = BookConfig.load(str(book))
    assert missing_entries(config) == ["04-escrow-program.md"]


def test_discover_entries(tmp_path):
    for name in ["10-end.md", "2-middle.md", "cover.png", "1-start.markdown"]:
        (tmp_path / name).write_text("x")
    (tmp_path / "images.md").mkdir()

    assert discover_entries(str(tmp_path)) == ["1-start.markdown", "2-middle.md", "10-end.md"]
    assert discover_entries(str(tmp_path / "missing")) == []


def test_resolve_output(make_book, tmp_path):
    config = BookConfig.load(str(make_book()))
    target = OutputTarget(".dist/solana-escrow-book.pdf", "pdf")

    assert resolve_output(config, target) == os.path.join(
        config.book_dir, ".dist", "solana-escrow-book.pdf"
    )
    assert resolve_output(config, target, str(tmp_path / "out")) == str(
        tmp_path / "out" / "solana-escrow-book.pdf"
    )
    webpub = OutputTarget(".dist/webpub/", "webpub")
    assert resolve_output(config, webpub, str(tmp_path)) == str(tmp_path / "webpub")
