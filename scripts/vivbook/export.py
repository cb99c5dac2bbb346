"""
Render a BookConfig as the vivliostyle.config.js the engine reads.
"""

import os
import re


CONFIG_JS = "vivliostyle.config.js"

# Keys written to the engine config, in this order
EXPORT_KEYS = [
    "title",
    "author",
    "size",
    "theme",
    "entry",
    "entryContext",
    "output",
    "language",
    "toc",
]

IDENTIFIER_RE = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")

JS_ESCAPES = {
    "\\": "\\\\",
    "'": "\\'",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}


def config_as_dict(config):
    """The exported record as an ordered plain dict. Unset and false values are dropped."""
    data = {}
    for key in EXPORT_KEYS:
        value = config.get(key)
        if value is None or value is False:
            continue
        if key == "output":
            value = [{"path": o["path"], "format": o["format"]} for o in value]
        elif key == "entry":
            value = list(value)
        data[key] = value
    return data


def _js_string(text):
    return "'" + "".join(JS_ESCAPES.get(ch, ch) for ch in text) + "'"


def _js_key(key):
    return key if IDENTIFIER_RE.match(key) else _js_string(key)


def _js_value(value, level):
    pad = "  " * (level + 1)
    close = "  " * level

    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    if isinstance(value, (int, float)):
        return repr(value)
    if isinstance(value, str):
        return _js_string(value)
    if isinstance(value, dict):
        lines = [f"{pad}{_js_key(k)}: {_js_value(v, level + 1)}," for k, v in value.items()]
        return "{\n" + "\n".join(lines) + f"\n{close}}}"
    if isinstance(value, (list, tuple)):
        lines = [f"{pad}{_js_value(v, level + 1)}," for v in value]
        return "[\n" + "\n".join(lines) + f"\n{close}]"
    raise TypeError(f"cannot render {type(value).__name__} as JavaScript")


def render_vivliostyle_config(config):
    """Text of a vivliostyle.config.js for this book."""
    return f"module.exports = {_js_value(config_as_dict(config), 0)};\n"


def write_vivliostyle_config(config, path=None):
    """Write the engine config (default: next to book.yaml). Returns the path."""
    path = path or os.path.join(config.book_dir, CONFIG_JS)
    with open(path, "w", encoding="utf-8") as f:
        f.write(render_vivliostyle_config(config))
    return path
