"""
Alpac - 配方驱动的下载与完整性校验工具
"""

__version__ = "0.1.0"

from alpac.digest import DigestKind
from alpac.download import Fetcher, FetchManager, Verdict, Verifier
from alpac.exceptions import (
    AlpacError,
    ConfigurationError,
    IntegrityMismatch,
    MalformedLocation,
    NoVersionsAvailable,
    TransportFailure,
    UnknownVersion,
)
from alpac.models import ArtifactDescriptor, Recipe, VersionRequest
from alpac.recipe_loader import load_recipe

__all__ = [
    "__version__",
    "DigestKind",
    "Verifier",
    "Verdict",
    "Fetcher",
    "FetchManager",
    "ArtifactDescriptor",
    "Recipe",
    "VersionRequest",
    "load_recipe",
    "AlpacError",
    "ConfigurationError",
    "MalformedLocation",
    "UnknownVersion",
    "NoVersionsAvailable",
    "TransportFailure",
    "IntegrityMismatch",
]
