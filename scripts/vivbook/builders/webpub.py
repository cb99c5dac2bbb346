"""
Web publication builder.

Vivliostyle writes a directory with the rendered HTML and a
W3C publication manifest; the manifest is what readers load.
"""

import os

from vivbook.builders.base import BaseBuilder


MANIFEST = "publication.json"


class WebpubBuilder(BaseBuilder):
    format_name = "WebPub"
    format = "webpub"

    @property
    def manifest(self):
        return os.path.join(self.output_file, MANIFEST)

    def prepare_output(self):
        os.makedirs(self.output_file, exist_ok=True)

    def build(self):
        self.header()

        if not self.run_engine():
            return False

        if not os.path.isfile(self.manifest):
            print(f"  ✗ No {MANIFEST} in {self.output_file}")
            return False

        print(f"  ✓ {self.output_file}")
        return True
