"""
vivbook — build pipeline for Vivliostyle Markdown books.

Public API:
    from vivbook.config import BookConfig, ConfigError
    from vivbook.resolve import find_book_dir, resolve_entries
    from vivbook.check import ConfigChecker, check_config
    from vivbook.export import render_vivliostyle_config
    from vivbook.builders import BUILDERS, builder_for
    from vivbook.theme import ThemeRef
"""

__version__ = "0.1.0"
