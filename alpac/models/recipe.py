"""
配方数据模型

配方按版本号保存下载源，并负责把版本请求（最新版本或指定版本）
解析为具体的 ArtifactDescriptor。
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

from alpac.exceptions import (
    AlpacError,
    NoVersionsAvailable,
    RecipeParseError,
    UnknownVersion,
)
from alpac.models.source import ArtifactDescriptor

_RUN = re.compile(r"(\d+)")


class VersionRequest(Enum):
    """版本请求"""

    LATEST = "latest"


def version_key(label: str) -> Tuple[Tuple[Tuple[int, Any], ...], str]:
    """
    版本号的自然排序键

    数字段按数值比较，其余按文本比较，原始字符串作为最后的比较依据，
    因此 "10" > "9"，"1.10" > "1.9"。
    """
    parts = tuple(
        (0, int(run)) if run.isdigit() else (1, run)
        for run in _RUN.split(label)
        if run
    )
    return parts, label


@dataclass(frozen=True)
class Recipe:
    """配方"""

    name: str
    description: Optional[str] = None
    homepage: Optional[str] = None
    license: Optional[str] = None
    topics: List[str] = field(default_factory=list)
    sources: Dict[str, ArtifactDescriptor] = field(default_factory=dict)

    def latest_version(self) -> Optional[str]:
        """配方能提供的最新版本，没有任何版本时返回 None"""
        if not self.sources:
            return None
        return max(self.sources, key=version_key)

    def list_versions(self) -> List[str]:
        """所有已定义的版本（快照，不保证顺序）"""
        return list(self.sources)

    def sorted_versions(self, descending: bool = True) -> List[str]:
        """按自然排序返回版本，供显示使用"""
        return sorted(self.sources, key=version_key, reverse=descending)

    def resolve(self, request: Union[VersionRequest, str]) -> ArtifactDescriptor:
        """
        解析版本请求

        Args:
            request: VersionRequest.LATEST 或具体的版本号

        Raises:
            NoVersionsAvailable: 请求最新版本但配方没有任何版本
            UnknownVersion: 指定的版本不存在
        """
        if request is VersionRequest.LATEST:
            version = self.latest_version()
            if version is None:
                raise NoVersionsAvailable(
                    f"配方 '{self.name}' 没有定义任何版本",
                    context={"recipe": self.name},
                )
            return self.sources[version]

        try:
            return self.sources[request]
        except KeyError:
            raise UnknownVersion(
                f"配方 '{self.name}' 中不存在版本 '{request}'",
                context={"recipe": self.name, "version": request},
            ) from None

    def all_descriptors(self) -> List[ArtifactDescriptor]:
        """所有版本的下载源"""
        return list(self.sources.values())

    @classmethod
    def from_dict(cls, data: Any) -> "Recipe":
        """
        从解析后的配方文档创建 Recipe

        Raises:
            RecipeParseError: 缺少必需字段或字段类型错误
        """
        if not isinstance(data, dict):
            raise RecipeParseError("配方文档必须是一个映射")

        name = data.get("name")
        if not isinstance(name, str) or not name:
            raise RecipeParseError("配方缺少 name 字段")

        for key in ("description", "homepage", "license"):
            value = data.get(key)
            if value is not None and not isinstance(value, str):
                raise RecipeParseError(
                    f"配方字段 {key} 必须是字符串", context={"recipe": name}
                )

        topics = data.get("topics") or []
        if not isinstance(topics, list) or not all(isinstance(t, str) for t in topics):
            raise RecipeParseError("topics 必须是字符串列表", context={"recipe": name})

        raw_sources = data.get("sources") or {}
        if not isinstance(raw_sources, dict):
            raise RecipeParseError("sources 必须是一个映射", context={"recipe": name})

        sources = {}
        for version, entry in raw_sources.items():
            if not isinstance(version, str):
                raise RecipeParseError(
                    f"版本号必须是字符串: {version!r}",
                    context={"recipe": name, "version": repr(version)},
                )
            sources[version] = _parse_source(name, version, entry)

        return cls(
            name=name,
            description=data.get("description"),
            homepage=data.get("homepage"),
            license=data.get("license"),
            topics=list(topics),
            sources=sources,
        )


def _parse_source(recipe: str, version: str, entry: Any) -> ArtifactDescriptor:
    context = {"recipe": recipe, "version": version}
    if not isinstance(entry, dict):
        raise RecipeParseError(f"版本 '{version}' 的下载源必须是一个映射", context=context)
    if not isinstance(entry.get("url"), str):
        raise RecipeParseError(f"版本 '{version}' 缺少 url 字段", context=context)
    size = entry.get("size")
    if size is not None and (isinstance(size, bool) or not isinstance(size, int) or size < 0):
        raise RecipeParseError(
            f"版本 '{version}' 的 size 必须是非负整数", context=context
        )
    try:
        return ArtifactDescriptor.from_dict(entry)
    except AlpacError as e:
        raise RecipeParseError(
            f"版本 '{version}' 的下载源无效: {e.message}", context=context
        ) from e
