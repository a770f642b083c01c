"""leakscope - exposed backend credential discovery and verification."""

from leakscope.version import __version__

__all__ = ["__version__"]
