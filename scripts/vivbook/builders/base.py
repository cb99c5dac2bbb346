"""
Base builder class for all output formats.

Subclasses implement `build()` and set `format_name` / `format`.
Shared logic (engine invocation, logging, output paths) lives here.
"""

import os
import shlex
import shutil
import subprocess
from abc import ABC, abstractmethod

from vivbook.export import write_vivliostyle_config
from vivbook.resolve import resolve_output


DEFAULT_ENGINE = "vivliostyle"


class BaseBuilder(ABC):
    """
    Abstract base for format builders.

    Subclasses must define:
        format_name:  str   — human-readable name ("PDF", "WebPub", etc.)
        format:       str   — engine format id ("pdf", "webpub", "epub")
        build():      method — the actual build logic
    """

    format_name = None  # Override in subclass
    format = None       # Override in subclass

    def __init__(self, config, target, output_dir=None, verbose=False, **kwargs):
        self.config = config
        self.book_dir = config.book_dir
        self.target = target
        self.output_dir = output_dir
        self.verbose = verbose
        self.kwargs = kwargs

    # ── Output path ────────────────────────────────────────

    @property
    def output_file(self):
        return resolve_output(self.config, self.target, self.output_dir)

    # ── Logging ────────────────────────────────────────────

    def log(self, msg):
        if self.verbose:
            print(msg)

    def header(self):
        print(f"\n{'─' * 60}")
        print(f"  Building {self.format_name}: {self.config.title}")
        print(f"{'─' * 60}")

    # ── Engine invocation ──────────────────────────────────

    def engine_command(self):
        """CLI prefix, overridable with VIVLIOSTYLE_CLI (e.g. 'npx vivliostyle')."""
        override = os.environ.get("VIVLIOSTYLE_CLI")
        if override:
            return shlex.split(override)
        return [DEFAULT_ENGINE]

    def config_file(self):
        """The rendered engine config, written on first use unless given."""
        path = self.kwargs.get("config_file")
        if not path:
            path = write_vivliostyle_config(self.config)
            self.kwargs["config_file"] = path
        return path

    def vivliostyle_args(self, extra_args=None):
        """
        Full `vivliostyle build` command for this target.
        """
        cmd = self.engine_command()
        cmd.extend([
            "build",
            "--config", self.config_file(),
            "--output", self.output_file,
            "--format", self.format,
        ])

        timeout = self.kwargs.get("timeout")
        if timeout:
            cmd.extend(["--timeout", str(timeout)])

        if extra_args:
            cmd.extend(extra_args)

        return cmd

    def exec_cmd(self, cmd, label="Command"):
        """Execute a command, handle errors consistently."""
        try:
            result = subprocess.run(
                cmd,
                cwd=self.book_dir,
                capture_output=not self.verbose,
                text=True,
            )
            if result.returncode != 0:
                print(f"  ✗ {label} failed (exit {result.returncode})")
                if result.stderr:
                    for line in result.stderr.strip().splitlines()[:20]:
                        print(f"    {line}")
                return False
            return True
        except FileNotFoundError:
            print(f"  ✗ {cmd[0]} not found")
            return False

    def check_tool(self, name):
        """Check that a required external tool is on PATH."""
        if not shutil.which(name):
            print(f"  ✗ {name} not found on PATH")
            return False
        return True

    def prepare_output(self):
        """Create the parent directory of the output target."""
        parent = os.path.dirname(self.output_file)
        if parent:
            os.makedirs(parent, exist_ok=True)

    def run_engine(self, extra_args=None):
        """Prepare, invoke the engine, report. Returns True on success."""
        self.prepare_output()
        cmd = self.vivliostyle_args(extra_args)

        self.log(f"  Config: {self.config_file()}")
        self.log(f"  Input:  {len(self.config.entry)} entries from {self.config.entryContext}")

        if not self.check_tool(cmd[0]):
            print("  Install the Vivliostyle CLI:")
            print("    npm install -g @vivliostyle/cli")
            return False

        return self.exec_cmd(cmd, f"{self.format_name} generation")

    # ── Abstract interface ─────────────────────────────────

    @abstractmethod
    def build(self):
        """
        Execute the build. Returns True on success, False on failure.
        """
        ...
