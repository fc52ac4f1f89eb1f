"""Find and delete node_modules trees, then reinstall dependencies."""

__version__ = "0.1.0"
