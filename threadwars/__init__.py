"""Two-player split-screen survival arcade game with a window-free simulation core."""

__version__ = "0.1.0"
__all__ = ["__version__"]