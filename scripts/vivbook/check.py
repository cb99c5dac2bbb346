"""
Book config checker.

Verifies the config against the manuscript on disk: entries exist,
chapter numbering runs in order, outputs are distinct, and the theme
and page size are usable by the engine.

Can be invoked from the CLI (`vivbook check`) or as a library.
"""

import os
import re
from collections import namedtuple

from vivbook.resolve import discover_entries, entry_number, resolve_entries, resolve_output
from vivbook.theme import installed_theme_version


Finding = namedtuple("Finding", ["severity", "subject", "message"])

# Named page sizes the engine understands (compared case-insensitively)
PAGE_SIZES = {
    "a3", "a4", "a5", "b4", "b5", "jis-b4", "jis-b5",
    "letter", "legal", "ledger",
}

ORIENTATIONS = ("portrait", "landscape")

LENGTH = r"\d+(?:\.\d+)?(?:mm|cm|in|pt|pc|px|q|Q)"
CUSTOM_SIZE_RE = re.compile(rf"^{LENGTH}\s+{LENGTH}$")


# ── Severity display ───────────────────────────────────────────────────

SEVERITY_COLOR = {
    "error":   "\033[31m✗\033[0m",
    "warning": "\033[33m!\033[0m",
    "info":    "\033[36m·\033[0m",
}

SEVERITY_PLAIN = {
    "error":   "[ERROR]",
    "warning": "[WARN]",
    "info":    "[INFO]",
}


def is_valid_size(size):
    """Named page size (optionally with orientation) or '<w> <h>' lengths."""
    tokens = str(size).strip().split()
    if tokens and tokens[-1].lower() in ORIENTATIONS and len(tokens) == 2:
        tokens = tokens[:1]
    if len(tokens) == 1 and tokens[0].lower() in PAGE_SIZES:
        return True
    return bool(CUSTOM_SIZE_RE.match(" ".join(tokens)))


# ── Individual checks ──────────────────────────────────────────────────


def _check_entries(config):
    findings = []
    context = config.entryContext
    context_exists = os.path.isdir(config.entry_dir)

    if not context_exists:
        findings.append(Finding(
            "error", "entryContext", f"'{context}' is not a directory"
        ))

    seen = set()
    for name, path in zip(config.entry, resolve_entries(config)):
        key = os.path.normpath(name)
        if key in seen:
            findings.append(Finding("error", name, "listed more than once in entry"))
        seen.add(key)
        if context_exists and not os.path.isfile(path):
            findings.append(Finding("error", name, f"not found in {context}"))

    previous = None
    for name in config.entry:
        number = entry_number(name)
        if number is None:
            continue
        if previous is not None and number <= previous[1]:
            findings.append(Finding(
                "warning", name,
                f"chapter number {number} follows {previous[0]} ({previous[1]})"
            ))
        previous = (name, number)

    listed = {os.path.normpath(name) for name in config.entry}
    for name in discover_entries(config.entry_dir):
        if name not in listed:
            findings.append(Finding("info", name, f"present in {context} but not in entry"))

    return findings


def _check_outputs(config):
    findings = []
    sources = {os.path.normcase(p) for p in resolve_entries(config)}
    sources.add(os.path.normcase(config.entry_dir))

    seen = set()
    for target in config.outputs:
        path = os.path.normcase(resolve_output(config, target))
        if path in seen:
            findings.append(Finding("error", target.path, "output path used more than once"))
        seen.add(path)
        if path in sources:
            findings.append(Finding(
                "error", target.path, "output would overwrite the manuscript sources"
            ))
    return findings


def _check_theme(config):
    theme = config.get("theme")
    if not theme:
        return []

    try:
        ref = config.theme_ref
    except ValueError as e:
        return [Finding("error", "theme", str(e))]

    if ref.is_local:
        if not os.path.exists(os.path.join(config.book_dir, ref.name)):
            return [Finding("error", "theme", f"local theme '{ref.name}' not found")]
        return []

    version = installed_theme_version(config.book_dir, ref)
    if version is None:
        return [Finding("info", "theme", f"{ref.name} is not installed in node_modules")]
    try:
        ok = ref.satisfies(version)
    except ValueError:
        return [Finding("warning", "theme", f"{ref.name} has unreadable version {version!r}")]
    if not ok:
        return [Finding(
            "warning", "theme",
            f"installed {ref.name} {version} does not satisfy {ref.constraint}"
        )]
    return []


def _check_size(config):
    size = config.get("size")
    if size and not is_valid_size(size):
        return [Finding("warning", "size", f"unrecognised page size '{size}'")]
    return []


CHECKS = [_check_entries, _check_outputs, _check_theme, _check_size]


def check_config(config):
    """Run every check. Returns a list of Findings."""
    findings = []
    for check in CHECKS:
        findings.extend(check(config))
    return findings


# ── Checker class ──────────────────────────────────────────────────────


class ConfigChecker:
    """
    Config checker with console reporting.

    Usage:
        checker = ConfigChecker(config, color=True)
        success = checker.run()
    """

    def __init__(self, config, verbose=False, color=True):
        self.config = config
        self.verbose = verbose
        self.symbols = SEVERITY_COLOR if color else SEVERITY_PLAIN
        self.counts = {"error": 0, "warning": 0, "info": 0}
        self.findings = []

    def run(self):
        """Check the config. Returns True if no errors found."""
        self.findings = check_config(self.config)

        for finding in self.findings:
            self.counts[finding.severity] += 1
            if finding.severity == "info" and not self.verbose:
                continue
            print(f"  {self.symbols[finding.severity]} {finding.subject}: {finding.message}")

        self._summary()
        return self.counts["error"] == 0

    def _summary(self):
        """Print the summary line."""
        total = sum(self.counts.values())
        entries = len(self.config.entry)

        print(f"{'─' * 50}")

        if total == 0:
            print(f"  No issues found across {entries} entries.")
            return

        parts = []
        if self.counts["error"]:
            parts.append(f"{self.counts['error']} errors")
        if self.counts["warning"]:
            parts.append(f"{self.counts['warning']} warnings")
        if self.counts["info"]:
            parts.append(f"{self.counts['info']} info")

        print(f"  {', '.join(parts)} across {entries} entries")
        if self.counts["info"] and not self.verbose:
            print("  Run with --verbose to list info findings")
