from vivbook.builders.epub import EpubBuilder
from vivbook.builders.pdf import PdfBuilder
from vivbook.builders.webpub import WebpubBuilder

BUILDERS = {
    "webpub": WebpubBuilder,
    "pdf": PdfBuilder,
    "epub": EpubBuilder,
}


def builder_for(config, target, **kwargs):
    """Instantiate the builder registered for an output target's format."""
    return BUILDERS[target.format](config, target, **kwargs)
