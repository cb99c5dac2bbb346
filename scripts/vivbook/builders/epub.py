"""
EPUB builder.

Pipeline: vivliostyle → epub → epubcheck validation.
"""

import os

from vivbook.builders.base import BaseBuilder
from vivbook.epubcheck import validate_epub


class EpubBuilder(BaseBuilder):
    format_name = "EPUB"
    format = "epub"

    def build(self):
        self.header()

        skip_validate = self.kwargs.get("no_validate", False)
        json_report = self.kwargs.get("json_report", None)

        if not self.run_engine():
            return False

        if not os.path.isfile(self.output_file):
            print(f"  ✗ Engine finished but {self.output_file} was not written")
            return False

        print(f"  ✓ {self.output_file}")

        # ── Validate ───────────────────────────────────────
        if not skip_validate:
            valid = validate_epub(
                self.output_file,
                verbose=self.verbose,
                json_report=json_report,
            )
            # None means epubcheck is unavailable, which is not a failure
            return valid is not False

        return True
