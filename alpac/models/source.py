"""
下载源数据模型

描述单个可下载的文件：地址、可选的大小提示以及各算法的预期摘要。
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional
from urllib.parse import unquote, urlparse

from alpac.digest import DIGEST_FIELDS, DigestKind
from alpac.exceptions import MalformedLocation


@dataclass(frozen=True)
class ArtifactDescriptor:
    """
    下载源

    size_hint 仅用于预估存储和显示进度，从不与实际传输大小比较。
    expected_digests 构造后不可修改。
    """

    location: str
    size_hint: Optional[int] = None
    expected_digests: Mapping[DigestKind, str] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def __post_init__(self):
        if not isinstance(self.location, str) or not self.location.strip():
            raise MalformedLocation("下载地址不能为空", context={"url": self.location})
        parsed = urlparse(self.location)
        if not parsed.scheme or (parsed.scheme != "file" and not parsed.netloc):
            raise MalformedLocation(
                f"无效的下载地址: {self.location}", context={"url": self.location}
            )
        if self.size_hint is not None and (
            isinstance(self.size_hint, bool)
            or not isinstance(self.size_hint, int)
            or self.size_hint < 0
        ):
            raise ValueError(f"size_hint 必须是非负整数: {self.size_hint!r}")
        digests = {
            (k if isinstance(k, DigestKind) else DigestKind.from_name(k)): v
            for k, v in dict(self.expected_digests).items()
        }
        object.__setattr__(self, "expected_digests", MappingProxyType(digests))

    def filename(self) -> str:
        """
        从地址中提取文件名

        先取路径最后一段再解码；解码结果不能包含路径分隔符，也不能是 . 或 ..

        Raises:
            MalformedLocation: 地址没有路径、最后一段为空（例如以 / 结尾）
                或解码后不是单一的文件名
        """
        path = urlparse(self.location).path
        name = unquote(path.rsplit("/", 1)[-1])
        if not name or name in (".", "..") or "/" in name or "\\" in name or "\0" in name:
            raise MalformedLocation(
                f"无法从地址中获取文件名: {self.location}",
                context={"url": self.location, "filename": name},
            )
        return name

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ArtifactDescriptor":
        """从配方中的 source 条目创建，未知字段会被忽略"""
        return cls(
            location=data["url"],
            size_hint=data.get("size"),
            expected_digests={
                name: data[name] for name in DIGEST_FIELDS if data.get(name) is not None
            },
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"url": self.location}
        if self.size_hint is not None:
            data["size"] = self.size_hint
        for kind, value in self.expected_digests.items():
            data[kind.value] = value
        return data
