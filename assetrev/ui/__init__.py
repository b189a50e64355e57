"""Console output package for assetrev."""

from .run_display import RunDisplay

__all__ = ["RunDisplay"]
