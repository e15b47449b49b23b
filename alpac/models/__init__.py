"""
Alpac 数据模型包

包含配方模型和下载源模型定义。
"""

from alpac.models.recipe import Recipe, VersionRequest, version_key
from alpac.models.source import ArtifactDescriptor

__all__ = [
    "Recipe",
    "VersionRequest",
    "version_key",
    "ArtifactDescriptor",
]
