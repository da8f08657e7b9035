"""fetch-abis - Fetch, build and relocate Sway contract ABIs.

This package clones upstream Sway repositories, runs `forc build --release`
in each checkout and moves the release outputs into a fixed local layout.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
