"""
Theme references: "@vivliostyle/theme-techbook@^1.0.1" → name + version range.

Ranges follow npm semantics for the forms themes are pinned with
in practice: exact, ^caret, ~tilde, comparators and x-wildcards.
"""

import json
import os
import re
from collections import namedtuple


RANGE_RE = re.compile(
    r"^(?P<op>\^|~|>=|<=|>|<|=)?\s*v?"
    r"(?P<major>\d+|[xX*])"
    r"(?:\.(?P<minor>\d+|[xX*]))?"
    r"(?:\.(?P<patch>\d+|[xX*]))?"
    r"(?:-[0-9A-Za-z.-]+)?(?:\+[0-9A-Za-z.-]+)?$"
)

VERSION_RE = re.compile(r"^v?(\d+)(?:\.(\d+))?(?:\.(\d+))?(?:[-+].*)?$")

WILDCARDS = ("x", "X", "*")

_COMPARE = {
    ">=": lambda a, b: a >= b,
    ">": lambda a, b: a > b,
    "<=": lambda a, b: a <= b,
    "<": lambda a, b: a < b,
}


def parse_version(version):
    """'1.2.3-beta' → (1, 2, 3). Missing parts are zero. Raises ValueError."""
    match = VERSION_RE.match(str(version).strip())
    if not match:
        raise ValueError(f"not a version: {version!r}")
    return tuple(int(part or 0) for part in match.groups())


def _pad(parts):
    return tuple(parts) + (0,) * (3 - len(parts))


def _bump(parts):
    """Upper bound for a partial version: (1, 2) → (1, 3, 0)."""
    bumped = list(parts[:-1]) + [parts[-1] + 1]
    return _pad(bumped)


def parse_range(constraint):
    """
    Turn a range string into a list of (operator, version) comparators.

    An empty list matches every version.
    """
    match = RANGE_RE.match(constraint.strip())
    if not match:
        raise ValueError(f"unsupported version range: {constraint!r}")

    op = match.group("op") or "="
    parts = []
    for name in ("major", "minor", "patch"):
        value = match.group(name)
        if value is None or value in WILDCARDS:
            break
        parts.append(int(value))

    if not parts:
        return []

    low = _pad(parts)

    if op == "^":
        if len(parts) == 1 or parts[0] > 0:
            high = (parts[0] + 1, 0, 0)
        elif len(parts) == 2 or parts[1] > 0:
            high = (0, parts[1] + 1, 0)
        else:
            high = (0, 0, parts[2] + 1)
        return [(">=", low), ("<", high)]

    if op == "~":
        high = _bump(parts[:2]) if len(parts) > 1 else (parts[0] + 1, 0, 0)
        return [(">=", low), ("<", high)]

    if op == "=":
        if len(parts) == 3:
            return [(">=", low), ("<=", low)]
        return [(">=", low), ("<", _bump(parts))]

    # Partial bounds cover the whole range: >1.2 is >=1.3.0, <=1.2 is <1.3.0
    if len(parts) < 3 and op == ">":
        return [(">=", _bump(parts))]
    if len(parts) < 3 and op == "<=":
        return [("<", _bump(parts))]

    return [(op, low)]


class ThemeRef(namedtuple("ThemeRef", ["name", "constraint", "is_local"])):
    """A parsed theme reference."""

    __slots__ = ()

    @classmethod
    def parse(cls, text):
        if not isinstance(text, str) or not text.strip():
            raise ValueError("theme reference is empty")
        text = text.strip()

        if text.startswith((".", "/")) or text.endswith(".css"):
            return cls(text, None, True)

        if text.startswith("@"):
            scoped, sep, constraint = text[1:].partition("@")
            name = "@" + scoped
            scope, _, package = scoped.partition("/")
            if not scope or not package:
                raise ValueError(f"scoped theme needs @scope/name: {text!r}")
        else:
            name, sep, constraint = text.partition("@")
            if not name:
                raise ValueError(f"theme has no package name: {text!r}")

        if sep and not constraint:
            raise ValueError(f"theme has an empty version after '@': {text!r}")

        if constraint:
            parse_range(constraint)
        return cls(name, constraint or None, False)

    def satisfies(self, version):
        """True if `version` falls inside the constraint (always True without one)."""
        if not self.constraint:
            return True
        target = parse_version(version)
        return all(
            _COMPARE[op](target, bound) for op, bound in parse_range(self.constraint)
        )

    def __str__(self):
        if self.constraint:
            return f"{self.name}@{self.constraint}"
        return self.name


def installed_theme_version(book_dir, ref):
    """Version from node_modules/<name>/package.json, or None if not installed."""
    if ref is None or ref.is_local:
        return None
    manifest = os.path.join(book_dir, "node_modules", *ref.name.split("/"), "package.json")
    if not os.path.isfile(manifest):
        return None
    with open(manifest, encoding="utf-8") as f:
        try:
            package = json.load(f)
        except ValueError:
            return None
    if not isinstance(package, dict):
        return None
    return package.get("version")
