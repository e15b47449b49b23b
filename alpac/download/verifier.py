"""
流式多算法校验器

一次读取、多路分发：每个数据块按相同顺序送入所有算法的累加器，
结束时对每种算法比对摘要，只有全部一致才判定为通过。
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Mapping, Optional, Union

from loguru import logger

from alpac.digest import DigestKind, decode_expected
from alpac.exceptions import SessionConsumedError


class Verdict(Enum):
    """校验结论"""

    VERIFIED = "verified"
    MISMATCH = "mismatch"

    def __bool__(self) -> bool:
        return self is Verdict.VERIFIED


@dataclass(frozen=True)
class DigestCheck:
    """单个算法的比对结果"""

    kind: DigestKind
    expected: str
    actual: str

    @property
    def ok(self) -> bool:
        return self.expected == self.actual


class Verifier:
    """
    单次校验会话

    通过 ``Verifier.begin`` 创建。预期摘要为空时会话直接判定为通过：
    没有提供任何校验值意味着没有需要检查的完整性声明。
    """

    def __init__(self, expected: Dict[DigestKind, bytes]):
        self._expected = expected
        self._hashers = {kind: kind.new() for kind in expected}
        self._bytes_seen = 0
        self._checks: Optional[List[DigestCheck]] = None

    @classmethod
    def begin(
        cls, expected_digests: Mapping[Union[DigestKind, str], str]
    ) -> "Verifier":
        """
        开始一次校验会话

        在读取任何数据之前解码全部预期值，编码错误会立即抛出
        ConfigurationError，而不是等到传输结束。

        Args:
            expected_digests: 算法到十六进制预期值的映射，可以为空

        Returns:
            新的校验会话
        """
        expected = {}
        for kind, text in expected_digests.items():
            if not isinstance(kind, DigestKind):
                kind = DigestKind.from_name(kind)
            expected[kind] = decode_expected(kind, text)
        if not expected:
            logger.debug("[校验] 未提供任何摘要，跳过完整性检查")
        return cls(expected)

    @property
    def kinds(self) -> List[DigestKind]:
        return list(self._expected)

    @property
    def bytes_seen(self) -> int:
        return self._bytes_seen

    @property
    def finished(self) -> bool:
        return self._checks is not None

    def update(self, chunk: bytes) -> None:
        """将数据块送入每个累加器"""
        if self._checks is not None:
            raise SessionConsumedError("校验会话已结束，不能继续写入数据")
        for hasher in self._hashers.values():
            hasher.update(chunk)
        self._bytes_seen += len(chunk)

    def finish(self) -> Verdict:
        """
        结束会话并给出结论

        对每种算法求最终摘要并与预期值比较，全部一致时返回 VERIFIED。
        会话只能结束一次。
        """
        if self._checks is not None:
            raise SessionConsumedError("校验会话已结束")
        self._checks = [
            DigestCheck(
                kind=kind,
                expected=self._expected[kind].hex(),
                actual=hasher.digest().hex(),
            )
            for kind, hasher in self._hashers.items()
        ]
        self._hashers = {}
        verdict = Verdict.VERIFIED if all(c.ok for c in self._checks) else Verdict.MISMATCH
        for check in self._checks:
            if not check.ok:
                logger.debug(
                    f"[校验] {check.kind.value} 不一致: 预期 {check.expected}, 实际 {check.actual}"
                )
        return verdict

    @property
    def checks(self) -> List[DigestCheck]:
        """各算法的比对结果，仅在 finish() 之后可用"""
        if self._checks is None:
            raise SessionConsumedError("校验会话尚未结束")
        return list(self._checks)

    def mismatches(self) -> List[DigestCheck]:
        return [c for c in self.checks if not c.ok]
