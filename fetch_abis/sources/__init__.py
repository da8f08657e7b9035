"""Source fetching module.

Clones the layout's repositories into the scratch directory.
"""

from fetch_abis.sources.git import CloneError, CloneResult, clone_repository

__all__ = ["CloneError", "CloneResult", "clone_repository"]
