"""
PDF builder.

Pipeline:
    1. Vivliostyle renders the entries in a headless browser
    2. Optional press-ready pass (PDF/X-1a, outlined fonts)
    3. Sanity check: file exists, approximate page count
"""

import os
import re

from vivbook.builders.base import BaseBuilder


PAGE_COUNT_RE = re.compile(rb"/Count\s+(\d+)")


class PdfBuilder(BaseBuilder):
    format_name = "PDF"
    format = "pdf"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.press_ready = kwargs.get("press_ready", False)

    def build(self):
        self.header()

        extra = ["--press-ready"] if self.press_ready else []
        if self.press_ready:
            self.log("  Mode:   press-ready")

        if not self.run_engine(extra):
            return False

        if not os.path.isfile(self.output_file):
            print(f"  ✗ Engine finished but {self.output_file} was not written")
            return False

        print(f"  ✓ {self.output_file}")
        self._report_page_count()
        return True

    def _report_page_count(self):
        """Quick page count from the PDF page tree."""
        try:
            with open(self.output_file, "rb") as f:
                counts = PAGE_COUNT_RE.findall(f.read())
        except OSError:
            return
        if counts:
            pages = max(int(c) for c in counts)
            print(f"  Pages: ~{pages}")
