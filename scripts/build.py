#!/usr/bin/env python3
"""
Run vivbook from a checkout without installing it.

    python scripts/build.py escrow --pdf

Same commands as the `vivbook` console script; see vivbook/cli.py.
"""

import os
import sys

# Ensure vivbook is importable from the scripts/ directory
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from vivbook.cli import run


if __name__ == "__main__":
    run()
