"""DocForge: document template composition and multi-format export."""

__version__ = "1.0.0"
