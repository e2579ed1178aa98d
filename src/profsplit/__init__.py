"""profsplit — split shared order profiles into billing and shipping records."""

__version__ = "0.1.0"
