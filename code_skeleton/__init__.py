"""
code_skeleton: compress source files into declaration skeletons.
"""

from .core import Language, SkeletonOptions, SkeletonResult, skeletonize

__version__ = "0.1.0"

__all__ = ["skeletonize", "SkeletonResult", "SkeletonOptions", "Language", "__version__"]
