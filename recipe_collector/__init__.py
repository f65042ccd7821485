"""Recipe extraction and enrichment core."""

__version__ = "0.1.0"
