"""
EPUB validation via epubcheck.

Locates epubcheck (env var, PATH, tools/ dir, or ~/),
runs it on a built epub, and parses the output summary.
"""

import os
import re
import shutil
import subprocess


SUMMARY_RE = re.compile(
    r"Messages:\s*(\d+)\s*fatal.*?(\d+)\s*error.*?(\d+)\s*warn",
    re.IGNORECASE | re.DOTALL,
)


def find_epubcheck(project_root=None):
    """
    Locate epubcheck. Checks in order:
        1. EPUBCHECK_JAR environment variable
        2. epubcheck command on PATH (brew/apt/npm install)
        3. tools/epubcheck*/epubcheck.jar under the project root
        4. ~/epubcheck*/epubcheck.jar

    Returns: (mode, path) where mode is 'jar' or 'cmd', or (None, None).
    """
    env_jar = os.environ.get("EPUBCHECK_JAR")
    if env_jar and os.path.exists(env_jar):
        return ("jar", env_jar)

    if shutil.which("epubcheck"):
        return ("cmd", "epubcheck")

    project_root = project_root or os.getcwd()
    for search_root in [os.path.join(project_root, "tools"), os.path.expanduser("~")]:
        if not os.path.isdir(search_root):
            continue
        for entry in sorted(os.listdir(search_root), reverse=True):
            if entry.startswith("epubcheck"):
                jar = os.path.join(search_root, entry, "epubcheck.jar")
                if os.path.exists(jar):
                    return ("jar", jar)

    return (None, None)


def parse_summary(output):
    """(fatals, errors, warnings) from epubcheck output, or None."""
    match = SUMMARY_RE.search(output)
    if not match:
        return None
    return tuple(int(n) for n in match.groups())


def validate_epub(epub_path, verbose=False, json_report=None, project_root=None):
    """
    Run epubcheck on an epub file.

    Args:
        epub_path:    Path to the .epub file
        verbose:      Show individual issues
        json_report:  Path for JSON report, or True for auto-naming
        project_root: Where to look for tools/epubcheck*/ (default: cwd)

    Returns:
        True if valid, False if errors, None if epubcheck unavailable.
    """
    mode, path = find_epubcheck(project_root)

    if mode is None:
        if verbose:
            print("  Skipping validation: epubcheck not found")
            print("  Install: brew install epubcheck")
            print("     or:   set EPUBCHECK_JAR=/path/to/epubcheck.jar")
        return None

    cmd = ["java", "-jar", path, epub_path] if mode == "jar" else [path, epub_path]

    if json_report:
        if json_report is True:
            json_report = os.path.splitext(epub_path)[0] + "_epubcheck.json"
        cmd.extend(["--json", json_report])

    if verbose:
        print("  Validating with epubcheck...")

    try:
        result = subprocess.run(cmd, capture_output=True, text=True)
    except FileNotFoundError:
        print("  Warning: Could not run epubcheck (java not found?)")
        return None

    output = result.stdout + result.stderr
    summary = parse_summary(output)

    if summary:
        fatals, errors, warnings = summary
        if fatals == 0 and errors == 0 and warnings == 0:
            print("  ✓ epubcheck: valid (no errors, no warnings)")
        elif fatals == 0 and errors == 0:
            print(f"  ! epubcheck: valid with {warnings} warning(s)")
        else:
            print(f"  ✗ epubcheck: {fatals} fatal, {errors} error(s), {warnings} warning(s)")
    elif result.returncode == 0:
        print("  ✓ epubcheck: valid")
    else:
        print(f"  ✗ epubcheck: failed (exit code {result.returncode})")

    if verbose or result.returncode != 0:
        for line in output.splitlines():
            if line.startswith(("ERROR", "WARNING", "FATAL")):
                print(f"    {line}")

    if json_report and os.path.exists(json_report):
        print(f"  Report: {json_report}")

    return result.returncode == 0
