"""
Book resolution and entry lookup.

Every command that needs to find a book directory or turn the
configured entries into files on disk imports from here.
"""

import os
import re

import yaml

from vivbook.config import find_config_file


# Extensions the engine accepts as entries
ENTRY_EXTENSIONS = (".md", ".markdown", ".html", ".xhtml")


def natural_sort_key(s):
    """Sort strings with embedded numbers naturally (2.md before 10.md)."""
    return [
        int(text) if text.isdigit() else text.lower()
        for text in re.split(r"(\d+)", s)
    ]


def entry_number(name):
    """Leading chapter number of an entry ('03-setup.md' → 3), or None."""
    match = re.match(r"^(\d+)", os.path.basename(name))
    return int(match.group(1)) if match else None


def _configured_title(book_dir):
    path = find_config_file(book_dir)
    if not path:
        return ""
    try:
        with open(path, encoding="utf-8") as f:
            cfg = yaml.safe_load(f)
    except (OSError, yaml.YAMLError):
        return ""
    if isinstance(cfg, dict):
        return str(cfg.get("title") or "")
    return ""


def find_book_dir(identifier, project_root):
    """
    Resolve a book identifier to the directory holding its config.

    Accepts:
        - Direct path:  books/solana-escrow   (or "." for the project root)
        - Keyword:      escrow    (matches dir name or configured title)

    Returns: absolute path to the book directory, or None.
    """
    # Direct path (absolute or relative)
    for candidate in [identifier, os.path.join(project_root, identifier)]:
        if os.path.isdir(candidate) and find_config_file(candidate):
            return os.path.abspath(candidate)

    if not os.path.isdir(project_root):
        return None

    identifier_lower = identifier.lower()

    for entry in sorted(os.listdir(project_root), key=natural_sort_key):
        book_path = os.path.join(project_root, entry)
        if not os.path.isdir(book_path) or not find_config_file(book_path):
            continue

        # Match by keyword in directory name
        if identifier_lower in entry.lower():
            return os.path.abspath(book_path)

        # Match by keyword in configured title
        if identifier_lower in _configured_title(book_path).lower():
            return os.path.abspath(book_path)

    return None


def resolve_entries(config):
    """Absolute path of each entry, in declared order."""
    return [os.path.join(config.entry_dir, name) for name in config.entry]


def missing_entries(config):
    """Entries whose files do not exist under entryContext."""
    return [
        name
        for name, path in zip(config.entry, resolve_entries(config))
        if not os.path.isfile(path)
    ]


def discover_entries(entry_dir):
    """Entry-like files present in a directory, naturally sorted."""
    if not os.path.isdir(entry_dir):
        return []
    files = [
        name
        for name in os.listdir(entry_dir)
        if name.lower().endswith(ENTRY_EXTENSIONS)
        and os.path.isfile(os.path.join(entry_dir, name))
    ]
    files.sort(key=natural_sort_key)
    return files


def resolve_output(config, target, output_dir=None):
    """
    Absolute path for an output target.

    With output_dir, the target keeps its file name but is placed there.
    """
    if output_dir:
        name = os.path.basename(os.path.normpath(target.path))
        return os.path.abspath(os.path.join(output_dir, name))
    return os.path.abspath(os.path.join(config.book_dir, target.path))
