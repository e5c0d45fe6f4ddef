"""Fantasy racing backend: submission rules, race scoring and standings."""

__version__ = "0.1.0"
