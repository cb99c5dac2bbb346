"""
Book configuration: load, validate, and provide defaults for book.yaml.

The record keeps the key names the Vivliostyle CLI reads
(entryContext, output[].format) so it can be exported verbatim.
"""

import json
import os
import re
from collections import namedtuple

import yaml

from vivbook.theme import ThemeRef


# Searched in order, first match wins
CONFIG_FILENAMES = ["book.yaml", "book.yml", "book.json"]

# Fields required in every book.yaml
REQUIRED_FIELDS = ["title", "author", "entry"]

# Formats the engine can produce
OUTPUT_FORMATS = ["webpub", "pdf", "epub"]

# Shorthand outputs ("book.pdf") infer their format from the extension
EXTENSION_FORMATS = {
    ".pdf": "pdf",
    ".epub": "epub",
    "": "webpub",
}

# Defaults applied if missing
DEFAULTS = {
    "entryContext": ".",
    "toc": False,
}

# Plain YAML scalars ("title: 1984") are read as text
SCALAR_TEXT_FIELDS = ["title", "author"]

# Must be strings when present
TEXT_FIELDS = ["size", "theme", "entryContext", "language"]

# Accepted spellings → canonical key
ALIASES = {
    "entry_context": "entryContext",
}


OutputTarget = namedtuple("OutputTarget", ["path", "format"])


class ConfigError(Exception):
    """Raised when book.yaml is missing or invalid."""
    pass


def find_config_file(book_dir):
    """Return the config file path in book_dir, or None."""
    for name in CONFIG_FILENAMES:
        path = os.path.join(book_dir, name)
        if os.path.isfile(path):
            return path
    return None


def slugify(text):
    """Lowercase ASCII slug for default output names."""
    slug = re.sub(r"[^a-z0-9]+", "-", (text or "").lower()).strip("-")
    return slug or "book"


def _normalize_output(item, index):
    if isinstance(item, str):
        ext = os.path.splitext(item.rstrip("/"))[1].lower()
        if ext not in EXTENSION_FORMATS:
            raise ConfigError(
                f"output[{index}]: cannot infer format from '{item}', "
                f"use {{path: ..., format: ...}}"
            )
        return {"path": item, "format": EXTENSION_FORMATS[ext]}

    if not isinstance(item, dict):
        raise ConfigError(
            f"output[{index}] must be a mapping with path and format, "
            f"got {type(item).__name__}"
        )

    path = item.get("path")
    if not isinstance(path, str) or not path.strip():
        raise ConfigError(f"output[{index}] has no path")

    fmt = item.get("format")
    if fmt not in OUTPUT_FORMATS:
        raise ConfigError(
            f"output[{index}] ({path}): unknown format {fmt!r}, "
            f"expected one of: {', '.join(OUTPUT_FORMATS)}"
        )

    return {"path": path, "format": fmt}


class BookConfig:
    """
    Loaded, validated book configuration.

    Usage:
        config = BookConfig.load(book_dir)
        config.title            # "Solana Escrow入門"
        config.entry[0]         # "00-index.md"
        config.outputs[1]       # OutputTarget(path=".dist/book.pdf", format="pdf")
        config.get("size")      # None if not set
    """

    def __init__(self, data, book_dir):
        self._data = data
        self.book_dir = book_dir

    @classmethod
    def load(cls, book_dir):
        """Load and validate the config file from a book directory."""
        path = find_config_file(book_dir)
        if not path:
            raise ConfigError(
                f"No {' / '.join(CONFIG_FILENAMES)} found in {book_dir}"
            )

        with open(path, encoding="utf-8") as f:
            try:
                if path.endswith(".json"):
                    data = json.load(f)
                else:
                    data = yaml.safe_load(f)
            except (yaml.YAMLError, ValueError) as e:
                raise ConfigError(f"Cannot parse {os.path.basename(path)}: {e}")

        return cls.from_dict(data, book_dir, source=os.path.basename(path))

    @classmethod
    def from_dict(cls, data, book_dir, source="book.yaml"):
        """Validate a parsed mapping and apply defaults."""
        if not isinstance(data, dict):
            raise ConfigError(f"{source} must be a mapping, got {type(data).__name__}")

        data = dict(data)
        for alias, key in ALIASES.items():
            if alias in data:
                data.setdefault(key, data.pop(alias))

        # Validate required fields
        missing = [key for key in REQUIRED_FIELDS if not data.get(key)]
        if missing:
            raise ConfigError(f"{source} missing required fields: {', '.join(missing)}")

        for key in SCALAR_TEXT_FIELDS:
            value = data[key]
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                data[key] = str(value)
            elif not isinstance(value, str):
                raise ConfigError(f"{source}: {key} must be a string")

        for key in TEXT_FIELDS:
            value = data.get(key)
            if value is not None and not isinstance(value, str):
                raise ConfigError(f"{source}: {key} must be a string")

        entry = data["entry"]
        if isinstance(entry, str):
            entry = [entry]
        if not isinstance(entry, list) or not all(
            isinstance(e, str) and e.strip() for e in entry
        ):
            raise ConfigError(f"{source}: entry must be a list of file names")
        data["entry"] = list(entry)

        outputs = data.get("output")
        if outputs is None:
            outputs = [{"path": f"{slugify(data['title'])}.pdf", "format": "pdf"}]
        elif isinstance(outputs, (str, dict)):
            outputs = [outputs]
        if not isinstance(outputs, list) or not outputs:
            raise ConfigError(f"{source}: output must be a non-empty list")
        data["output"] = [_normalize_output(o, i) for i, o in enumerate(outputs)]

        if data.get("theme") is not None:
            try:
                ThemeRef.parse(data["theme"])
            except ValueError as e:
                raise ConfigError(f"{source}: invalid theme: {e}")

        # Apply top-level defaults
        for key, default in DEFAULTS.items():
            if data.get(key) is None:
                data[key] = default

        return cls(data, book_dir)

    # ── Attribute access ───────────────────────────────────

    def __getattr__(self, name):
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self._data[name]
        except KeyError:
            raise AttributeError(f"BookConfig has no field '{name}'")

    def get(self, key, default=None):
        return self._data.get(key, default)

    def __getitem__(self, key):
        return self._data[key]

    def __contains__(self, key):
        return key in self._data

    # ── Convenience ────────────────────────────────────────

    @property
    def outputs(self):
        return [OutputTarget(o["path"], o["format"]) for o in self._data["output"]]

    @property
    def entry_dir(self):
        """Absolute directory entries are resolved against."""
        return os.path.abspath(os.path.join(self.book_dir, self.entryContext))

    @property
    def theme_ref(self):
        theme = self.get("theme")
        return ThemeRef.parse(theme) if theme else None

    @property
    def slug(self):
        return slugify(self.title)

    def summary(self):
        """Print a short config summary."""
        print(f"\n  Book:    {self.title}")
        print(f"  Author:  {self.author}")
        print(f"  Source:  {self.book_dir}")
        if self.get("size"):
            print(f"  Size:    {self.size}")
        if self.get("theme"):
            print(f"  Theme:   {self.theme}")
        print(f"  Entries: {len(self.entry)} in {self.entryContext}")
