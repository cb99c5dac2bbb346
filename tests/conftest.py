"""Shared fixtures: a book directory laid out like the Solana Escrow book."""

import copy
import os
import subprocess

import pytest
import yaml


ESCROW = {
    "title": "Solana Escrow入門",
    "author": "Kouta Ozaki",
    "size": "A5",
    "theme": "@vivliostyle/theme-techbook@^1.0.1",
    "entry": [
        "00-index.md",
        "01-introduction.md",
        "02-what-is-escrow.md",
        "03-escrow-project-setup.md",
        "04-escrow-program.md",
        "05-escrow-client.md",
        "06-escrow-cli.md",
        "07-run-escrow.md",
        "08-conclusion.md",
        "99-colophon.md",
    ],
    "entryContext": "./articles",
    "output": [
        {"path": ".dist/webpub", "format": "webpub"},
        {"path": ".dist/solana-escrow-book.pdf", "format": "pdf"},
    ],
}


@pytest.fixture
def escrow_data():
    return copy.deepcopy(ESCROW)


@pytest.fixture
def make_book(tmp_path, escrow_data):
    """
    Write book.yaml plus one markdown file per entry.

    make_book()                          escrow book in tmp_path/book
    make_book(data, files=[...])         custom config / chapter files
    """

    def _make(data=None, files=None, name="book"):
        book = tmp_path / name
        book.mkdir()
        data = escrow_data if data is None else data
        (book / "book.yaml").write_text(
            yaml.safe_dump(data, allow_unicode=True, sort_keys=False),
            encoding="utf-8",
        )
        context = book / data.get("entryContext", ".")
        context.mkdir(parents=True, exist_ok=True)
        for entry in data.get("entry", []) if files is None else files:
            (context / entry).write_text(f"# {entry}\n", encoding="utf-8")
        return book

    return _make


class FakeEngine:
    """Records engine commands and writes plausible output in their place."""

    def __init__(self):
        self.calls = []
        self.returncode = 0
        self.stderr = ""
        self.manifest = True

    def __call__(self, cmd, cwd=None, capture_output=False, text=False):
        self.calls.append(cmd)
        if self.returncode == 0:
            output = cmd[cmd.index("--output") + 1]
            fmt = cmd[cmd.index("--format") + 1]
            if fmt == "webpub":
                os.makedirs(output, exist_ok=True)
                if self.manifest:
                    with open(os.path.join(output, "publication.json"), "w") as f:
                        f.write("{}")
            else:
                with open(output, "wb") as f:
                    f.write(b"%PDF-1.7 /Type /Pages /Count 12")
        return subprocess.CompletedProcess(cmd, self.returncode, "", self.stderr)


@pytest.fixture
def fake_engine(monkeypatch):
    """Replace the Vivliostyle CLI with a FakeEngine."""
    engine = FakeEngine()
    monkeypatch.setattr("vivbook.builders.base.subprocess.run", engine)
    monkeypatch.setattr("vivbook.builders.base.shutil.which", lambda name: f"/usr/bin/{name}")
    monkeypatch.delenv("VIVLIOSTYLE_CLI", raising=False)
    return engine
