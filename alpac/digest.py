"""
摘要算法集合

定义支持的哈希算法、增量累加器的创建以及预期摘要值的解码。
"""

import binascii
import hashlib
from enum import Enum

from alpac.exceptions import ConfigurationError


class DigestKind(Enum):
    """支持的摘要算法，值与配方字段名一致"""

    MD5 = "md5"
    SHA1 = "sha1"
    SHA224 = "sha224"
    SHA256 = "sha256"
    SHA384 = "sha384"
    SHA512 = "sha512"

    @property
    def digest_size(self) -> int:
        """摘要输出的字节长度"""
        return _DIGEST_SIZES[self]

    def new(self):
        """创建一个新的增量哈希累加器"""
        return hashlib.new(self.value)

    @classmethod
    def from_name(cls, name: str) -> "DigestKind":
        try:
            return cls(name.lower())
        except ValueError:
            raise ConfigurationError(
                f"不支持的摘要算法: {name}", context={"kind": name}
            ) from None


_DIGEST_SIZES = {
    DigestKind.MD5: 16,
    DigestKind.SHA1: 20,
    DigestKind.SHA224: 28,
    DigestKind.SHA256: 32,
    DigestKind.SHA384: 48,
    DigestKind.SHA512: 64,
}

# 配方中可以出现的摘要字段
DIGEST_FIELDS = tuple(kind.value for kind in DigestKind)


def decode_expected(kind: DigestKind, text: str) -> bytes:
    """
    将预期摘要的十六进制文本解码为字节

    Args:
        kind: 摘要算法
        text: 十六进制编码的预期值（大小写均可）

    Returns:
        解码后的摘要字节

    Raises:
        ConfigurationError: 文本不是有效的十六进制或长度与算法不符
    """
    if not isinstance(text, str):
        raise ConfigurationError(
            f"{kind.value} 预期值必须是字符串",
            context={"kind": kind.value, "value": repr(text)},
        )
    cleaned = text.strip()
    if len(cleaned) != kind.digest_size * 2:
        raise ConfigurationError(
            f"{kind.value} 预期值长度应为 {kind.digest_size * 2} 个十六进制字符",
            context={"kind": kind.value, "value": text},
        )
    try:
        return binascii.unhexlify(cleaned)
    except (binascii.Error, ValueError):
        raise ConfigurationError(
            f"{kind.value} 预期值不是有效的十六进制: {text}",
            context={"kind": kind.value, "value": text},
        ) from None
