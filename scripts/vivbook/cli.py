"""
Unified command line for vivbook.

Combines checking, exporting the engine config, and building
(webpub, pdf, epub) into a single entry point.

Usage:
    vivbook escrow                      Build every configured output
    vivbook build escrow --pdf          Build only the PDF targets
    vivbook build . --press-ready       PDF/X-1a for print
    vivbook check escrow                Check entries, outputs, theme
    vivbook export escrow --stdout      Show the vivliostyle.config.js
    vivbook theme escrow                Show theme and installed version
    vivbook validate escrow             Run epubcheck on built epubs

Requires: PyYAML, @vivliostyle/cli (npm)
Optional: java + epubcheck (EPUB validation)
"""

import argparse
import json
import os
import sys
import traceback

from vivbook.builders import BUILDERS, builder_for
from vivbook.check import ConfigChecker
from vivbook.config import BookConfig, ConfigError
from vivbook.epubcheck import validate_epub
from vivbook.export import (
    config_as_dict,
    render_vivliostyle_config,
    write_vivliostyle_config,
)
from vivbook.resolve import find_book_dir, resolve_output
from vivbook.theme import installed_theme_version


KNOWN_COMMANDS = {"build", "check", "export", "theme", "validate"}


# ── Resolve book ───────────────────────────────────────────────────────


def resolve_book(identifier):
    """Find book directory, load config. Exits on failure."""
    project_root = os.getcwd()
    book_dir = find_book_dir(identifier, project_root)

    if not book_dir:
        print(f"Error: Could not find book '{identifier}'")
        print(f"  Searched in: {project_root}")
        print("  Tip: Run from the project root, or pass a direct path.")
        sys.exit(1)

    try:
        config = BookConfig.load(book_dir)
    except ConfigError as e:
        print(f"Error: {e}")
        sys.exit(1)

    return book_dir, config


def _use_color(args):
    return not getattr(args, "no_color", False) and sys.stdout.isatty()


# ── Build command ──────────────────────────────────────────────────────


def cmd_build(args):
    """Build the configured output targets."""
    book_dir, config = resolve_book(args.book)

    formats = [fmt for fmt in BUILDERS if getattr(args, fmt, False)]
    targets = [t for t in config.outputs if not formats or t.format in formats]

    config.summary()

    if not targets:
        print(f"Error: No output targets with format {', '.join(formats)} configured")
        sys.exit(1)

    if not args.no_check:
        print()
        checker = ConfigChecker(config, verbose=args.verbose, color=_use_color(args))
        if not checker.run():
            print("  Fix the errors above, or pass --no-check to build anyway.")
            sys.exit(1)

    if args.output_dir:
        os.makedirs(args.output_dir, exist_ok=True)
        print(f"  Output:  {args.output_dir}")

    config_file = write_vivliostyle_config(config)

    kwargs = {
        "output_dir": args.output_dir,
        "verbose": args.verbose,
        "config_file": config_file,
        "press_ready": args.press_ready,
        "timeout": args.timeout,
        "no_validate": args.no_validate,
        "json_report": args.json_report,
    }

    results = []
    for target in targets:
        builder = builder_for(config, target, **kwargs)
        results.append((target, builder.build()))

    # Summary
    print(f"\n{'─' * 60}")
    failed = [target.path for target, ok in results if not ok]
    if failed:
        print(f"  Done with errors: {', '.join(failed)} failed")
        sys.exit(1)
    else:
        print(f"  Done. {len(results)} output(s) built successfully.")


# ── Check command ──────────────────────────────────────────────────────


def cmd_check(args):
    """Check the config against the manuscript."""
    book_dir, config = resolve_book(args.book)

    print(f"\n  Checking: {config.title}")
    print(f"  Source:   {book_dir}")
    print()

    checker = ConfigChecker(config, verbose=args.verbose, color=_use_color(args))
    sys.exit(0 if checker.run() else 1)


# ── Export command ─────────────────────────────────────────────────────


def cmd_export(args):
    """Render the engine config (or the plain record as JSON)."""
    book_dir, config = resolve_book(args.book)

    if args.json:
        text = json.dumps(config_as_dict(config), indent=2, ensure_ascii=False) + "\n"
    else:
        text = render_vivliostyle_config(config)

    if args.stdout or (args.json and not args.output):
        sys.stdout.write(text)
        return

    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(text)
        path = args.output
    else:
        path = write_vivliostyle_config(config)

    print(f"  ✓ {path}")


# ── Theme command ──────────────────────────────────────────────────────


def cmd_theme(args):
    """Show the configured theme and whether the installed version fits."""
    book_dir, config = resolve_book(args.book)

    ref = config.theme_ref
    if ref is None:
        print("  No theme configured (engine default styles)")
        return

    print(f"\n  Theme:      {ref.name}")
    if ref.is_local:
        found = os.path.exists(os.path.join(book_dir, ref.name))
        print(f"  Local:      {'found' if found else 'missing'}")
        sys.exit(0 if found else 1)

    print(f"  Constraint: {ref.constraint or '(any)'}")

    version = installed_theme_version(book_dir, ref)
    if version is None:
        print("  Installed:  no (the engine installs it on first build)")
        return

    try:
        ok = ref.satisfies(version)
    except ValueError:
        print(f"  Installed:  {version!r} ✗ unreadable version")
        sys.exit(1)
    print(f"  Installed:  {version} {'✓' if ok else '✗ does not satisfy constraint'}")
    sys.exit(0 if ok else 1)


# ── Validate command ───────────────────────────────────────────────────


def cmd_validate(args):
    """Run epubcheck on every built epub target."""
    book_dir, config = resolve_book(args.book)

    targets = [t for t in config.outputs if t.format == "epub"]
    if not targets:
        print("  Error: No epub output configured.")
        sys.exit(1)

    results = []
    for target in targets:
        epub_file = resolve_output(config, target, args.output_dir)

        print(f"\n{'─' * 60}")
        print(f"  Validating: {epub_file}")
        print(f"{'─' * 60}")

        if not os.path.exists(epub_file):
            print(f"  Error: {epub_file} not found. Build with --epub first.")
            results.append(False)
            continue

        results.append(
            validate_epub(
                epub_file,
                verbose=True,
                json_report=args.json_report,
                project_root=os.getcwd(),
            )
        )

    sys.exit(0 if all(r is not False for r in results) else 1)


# ── Argument Parser ────────────────────────────────────────────────────


def build_parser():
    parser = argparse.ArgumentParser(
        prog="vivbook",
        description="Vivliostyle book build pipeline",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
examples:
  %(prog)s escrow                    Build every configured output
  %(prog)s build escrow --pdf        Build PDF targets only
  %(prog)s check escrow              Check entries and outputs
  %(prog)s export escrow --stdout    Print vivliostyle.config.js
  %(prog)s theme escrow              Compare installed theme version
  %(prog)s validate escrow           Run epubcheck on built epubs
        """,
    )

    sub = parser.add_subparsers(dest="command")

    # ── build (default when no subcommand) ─────────────────
    build_p = sub.add_parser("build", help="Build output targets (default)")
    _add_book_arg(build_p)
    _add_build_args(build_p)

    # ── check ──────────────────────────────────────────────
    check_p = sub.add_parser("check", help="Check config against the manuscript")
    _add_book_arg(check_p)
    check_p.add_argument("--verbose", "-v", action="store_true")
    check_p.add_argument("--no-color", action="store_true", help="Plain output")

    # ── export ─────────────────────────────────────────────
    export_p = sub.add_parser("export", help="Write vivliostyle.config.js")
    _add_book_arg(export_p)
    export_p.add_argument("--output", "-o", help="Write to this path instead")
    export_p.add_argument("--stdout", action="store_true", help="Print instead of writing")
    export_p.add_argument("--json", action="store_true", help="Plain JSON record")

    # ── theme ──────────────────────────────────────────────
    theme_p = sub.add_parser("theme", help="Show theme and installed version")
    _add_book_arg(theme_p)

    # ── validate ───────────────────────────────────────────
    val_p = sub.add_parser("validate", help="Run epubcheck on built epubs")
    _add_book_arg(val_p)
    val_p.add_argument("--output-dir", help="Override output directory")
    val_p.add_argument("--json-report", nargs="?", const=True, default=None)

    return parser


def _add_book_arg(parser):
    parser.add_argument("book", help="Book directory, or keyword in its name or title")


def _add_build_args(parser):
    """Add format flags and build options to a parser."""
    fmt = parser.add_argument_group("output formats (default: all configured)")
    fmt.add_argument("--webpub", action="store_true", help="Build webpub targets")
    fmt.add_argument("--pdf", action="store_true", help="Build PDF targets")
    fmt.add_argument("--epub", action="store_true", help="Build EPUB targets")

    opts = parser.add_argument_group("options")
    opts.add_argument("--output-dir", help="Place outputs in this directory")
    opts.add_argument("--verbose", "-v", action="store_true")
    opts.add_argument("--no-color", action="store_true", help="Plain output")
    opts.add_argument(
        "--no-check", action="store_true", help="Build even if the config check fails"
    )
    opts.add_argument(
        "--press-ready", action="store_true", help="PDF/X-1a output for print"
    )
    opts.add_argument(
        "--timeout", type=int, default=None, help="Engine timeout in seconds"
    )
    opts.add_argument(
        "--no-validate", action="store_true", help="Skip epubcheck after epub build"
    )
    opts.add_argument(
        "--json-report",
        nargs="?",
        const=True,
        default=None,
        help="Save epubcheck JSON report",
    )


# ── Main ───────────────────────────────────────────────────────────────


def main(argv=None):
    parser = build_parser()
    argv = sys.argv[1:] if argv is None else list(argv)

    # Allow bare "vivbook escrow --pdf" without the "build" subcommand
    if argv and argv[0] not in KNOWN_COMMANDS and not argv[0].startswith("-"):
        argv = ["build"] + argv

    args = parser.parse_args(argv)

    dispatch = {
        "build": cmd_build,
        "check": cmd_check,
        "export": cmd_export,
        "theme": cmd_theme,
        "validate": cmd_validate,
    }

    handler = dispatch.get(args.command)
    if handler:
        handler(args)
    else:
        parser.print_help()


def run():
    """Console entry point."""
    try:
        main()
    except KeyboardInterrupt:
        print("\nCancelled.")
        sys.exit(1)
    except Exception as e:
        log_path = "build_error.log"
        with open(log_path, "w") as f:
            traceback.print_exc(file=f)
        print(f"\nUnexpected error: {e}")
        print(f"Full traceback written to {log_path}")
        sys.exit(1)
