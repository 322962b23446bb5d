"""docrag: document question answering over extracted, chunked and embedded files."""

__version__ = "0.1.0"
