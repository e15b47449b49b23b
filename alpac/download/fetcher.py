"""
下载协调器

驱动传输层，把收到的每个数据块按顺序同时写入缓冲区（或磁盘）和校验器，
只有传输成功且校验通过时才返回结果。
"""

import os
import tempfile
from pathlib import Path
from typing import Optional, Union

import aiofiles
from loguru import logger

from alpac.config import FetchSettings
from alpac.download.transport import DefaultTransport, Transport
from alpac.download.verifier import Verdict, Verifier
from alpac.exceptions import IntegrityMismatch, PersistError, TransportFailure
from alpac.models import ArtifactDescriptor


class _Progress:
    """按 5% 步长记录进度，仅在有大小提示时启用"""

    def __init__(self, name: str, total: Optional[int]):
        self.name = name
        self.total = total or 0
        self.received = 0
        self._last_percent = 0.0

    def advance(self, size: int) -> None:
        self.received += size
        if self.total <= 0:
            return
        percent = min(self.received / self.total * 100, 100.0)
        if percent - self._last_percent >= 5:
            logger.info(f"[进度] {self.name}: {percent:.1f}%")
            self._last_percent = percent


class Fetcher:
    """单个文件的下载与校验"""

    def __init__(
        self,
        transport: Optional[Transport] = None,
        settings: Optional[FetchSettings] = None,
    ):
        self.settings = settings or FetchSettings()
        self.transport = transport or DefaultTransport(self.settings)

    async def verify_and_fetch(self, descriptor: ArtifactDescriptor) -> bytes:
        """
        下载并校验文件内容

        Returns:
            校验通过的文件内容

        Raises:
            ConfigurationError: 预期摘要编码无效（在任何网络请求之前）
            TransportFailure: 传输失败
            IntegrityMismatch: 内容与预期摘要不一致
        """
        verifier = Verifier.begin(descriptor.expected_digests)
        # size_hint 只用于进度显示
        data = bytearray()

        async def sink(chunk: bytes) -> None:
            data.extend(chunk)

        await self._pump(descriptor, verifier, sink)
        self._conclude(descriptor, verifier)
        return bytes(data)

    async def download_to_dir(
        self, descriptor: ArtifactDescriptor, out_dir: Union[str, Path]
    ) -> Path:
        """
        下载、校验并保存到目录

        数据先流式写入本会话独占的 ``.<filename>.*.part`` 临时文件，校验通过后才重命名为最终文件名；
        任何失败都会删除不完整的文件。

        Returns:
            保存后的文件路径
        """
        filename = descriptor.filename()
        verifier = Verifier.begin(descriptor.expected_digests)

        out_dir = Path(out_dir)
        target = out_dir / filename
        try:
            os.makedirs(out_dir, exist_ok=True)
            # 每个会话独占一个临时文件，同名文件并发下载时互不覆盖
            fd, partial_name = tempfile.mkstemp(
                dir=out_dir, prefix=f".{filename}.", suffix=".part"
            )
            os.close(fd)
        except OSError as e:
            raise PersistError(
                f"无法创建临时文件: {out_dir}", context={"path": str(out_dir), "error": str(e)}
            ) from e
        partial = Path(partial_name)

        try:
            try:
                async with aiofiles.open(partial, "wb") as f:
                    await self._pump(descriptor, verifier, f.write)
            except OSError as e:
                # 传输层的错误已包装为 TransportFailure，这里只剩文件写入错误
                raise PersistError(
                    f"写入文件失败: {partial}", context={"path": str(partial), "error": str(e)}
                ) from e
            self._conclude(descriptor, verifier)
            try:
                os.replace(partial, target)
            except OSError as e:
                raise PersistError(
                    f"无法保存文件: {target}", context={"path": str(target), "error": str(e)}
                ) from e
        except BaseException:
            # 清理不完整的文件
            if partial.exists():
                try:
                    partial.unlink()
                except OSError as e:
                    logger.warning(f"[警告] 无法删除临时文件 {partial}: {e}")
            raise

        logger.success(f"[完成] '{filename}' 已保存到 {target}")
        return target

    async def _pump(self, descriptor: ArtifactDescriptor, verifier: Verifier, sink) -> None:
        name = descriptor.location
        logger.info(f"[开始] 下载: {name}")
        if descriptor.size_hint is not None:
            logger.info(f"[信息] 文件大小: {descriptor.size_hint / (1024 * 1024):.2f} MB")
        progress = _Progress(name, descriptor.size_hint)
        stream = self.transport.stream(descriptor.location)
        try:
            async for chunk in stream:
                await sink(chunk)
                verifier.update(chunk)
                progress.advance(len(chunk))
        except TransportFailure:
            logger.error(f"[错误] 下载 '{name}' 失败")
            raise
        finally:
            # 写入失败时也要关闭流，释放底层连接
            aclose = getattr(stream, "aclose", None)
            if aclose is not None:
                await aclose()
        logger.debug(f"[信息] 共接收 {verifier.bytes_seen} 字节")

    @staticmethod
    def _conclude(descriptor: ArtifactDescriptor, verifier: Verifier) -> None:
        verdict = verifier.finish()
        if verdict is Verdict.MISMATCH:
            failed = [c.kind.value for c in verifier.mismatches()]
            logger.error(f"[错误] '{descriptor.location}' 校验失败: {', '.join(failed)}")
            raise IntegrityMismatch(
                f"摘要校验失败: {descriptor.location}",
                context={
                    "url": descriptor.location,
                    "mismatched": failed,
                    "checks": {
                        c.kind.value: {"expected": c.expected, "actual": c.actual}
                        for c in verifier.checks
                    },
                },
            )
        if verifier.kinds:
            kinds = ", ".join(k.value for k in verifier.kinds)
            logger.info(f"[校验] '{descriptor.location}' 校验通过 ({kinds})")
        else:
            logger.info(f"[校验] '{descriptor.location}' 未提供摘要，视为通过")
