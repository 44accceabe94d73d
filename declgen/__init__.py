"""Template-driven binding generation from C/C++ header declarations."""

__version__ = "0.1.0"
