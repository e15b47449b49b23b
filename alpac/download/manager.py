"""
批量下载管理器

并发下载并校验配方中的多个下载源。每个文件使用独立的校验会话，
单个文件失败不会中断整批任务。
"""

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

from loguru import logger

from alpac.download.fetcher import Fetcher
from alpac.exceptions import AlpacError, DuplicateTarget, TransportFailure
from alpac.models import ArtifactDescriptor


@dataclass
class FetchStats:
    """下载统计"""

    total: int = 0
    completed: int = 0
    failed: int = 0
    bytes_downloaded: int = 0


@dataclass
class FetchOutcome:
    """单个下载源的结果"""

    descriptor: ArtifactDescriptor
    path: Optional[Path] = None
    error: Optional[AlpacError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class FetchManager:
    """批量下载管理器"""

    def __init__(
        self,
        fetcher: Fetcher,
        max_concurrent: Optional[int] = None,
        max_retries: Optional[int] = None,
        retry_delay: Optional[float] = None,
    ):
        settings = fetcher.settings
        self.fetcher = fetcher
        self.max_concurrent = max_concurrent or settings.max_concurrent
        self.max_retries = settings.max_retries if max_retries is None else max_retries
        self.retry_delay = settings.retry_delay if retry_delay is None else retry_delay
        self.stats = FetchStats()

    async def fetch_all(
        self, descriptors: Iterable[ArtifactDescriptor], out_dir: Union[str, Path]
    ) -> List[FetchOutcome]:
        """
        并发下载所有下载源

        会保存为同一文件名的下载源在任何网络请求之前就以 DuplicateTarget 失败。

        Returns:
            与输入顺序一致的结果列表
        """
        descriptors = list(descriptors)
        self.stats.total += len(descriptors)
        rejected = self._check_targets(descriptors)
        semaphore = asyncio.Semaphore(self.max_concurrent)
        logger.info(
            f"[启动] 共 {len(descriptors)} 个文件，最大并发数: {self.max_concurrent}"
        )

        async def run(index: int, descriptor: ArtifactDescriptor) -> FetchOutcome:
            if index in rejected:
                return self._failed(descriptor, rejected[index])
            async with semaphore:
                return await self._fetch_one(descriptor, out_dir)

        return list(
            await asyncio.gather(*(run(i, d) for i, d in enumerate(descriptors)))
        )

    @staticmethod
    def _check_targets(descriptors: List[ArtifactDescriptor]) -> Dict[int, AlpacError]:
        """找出文件名无效或重复的下载源，返回 下标 -> 错误"""
        rejected: Dict[int, AlpacError] = {}
        by_name: Dict[str, List[int]] = {}
        for index, descriptor in enumerate(descriptors):
            try:
                by_name.setdefault(descriptor.filename(), []).append(index)
            except AlpacError as e:
                rejected[index] = e
        for name, indexes in by_name.items():
            if len(indexes) < 2:
                continue
            urls = [descriptors[i].location for i in indexes]
            for index in indexes:
                rejected[index] = DuplicateTarget(
                    f"多个下载源会保存为同一个文件: {name}",
                    context={"filename": name, "urls": urls},
                )
        return rejected

    async def _fetch_one(
        self, descriptor: ArtifactDescriptor, out_dir: Union[str, Path]
    ) -> FetchOutcome:
        attempt = 0
        while True:
            try:
                path = await self.fetcher.download_to_dir(descriptor, out_dir)
                break
            except TransportFailure as e:
                # 只有传输错误会重试，校验失败和配置错误不会
                if attempt >= self.max_retries:
                    return self._failed(descriptor, e)
                delay = self.retry_delay * (2**attempt)
                logger.warning(
                    f"[重试] 下载 '{descriptor.location}' 失败 (第 {attempt + 1} 次): {e}. "
                    f"{delay:.1f}s 后重试..."
                )
                await asyncio.sleep(delay)
                attempt += 1
            except AlpacError as e:
                return self._failed(descriptor, e)

        self.stats.completed += 1
        self.stats.bytes_downloaded += path.stat().st_size
        return FetchOutcome(descriptor=descriptor, path=path)

    def _failed(self, descriptor: ArtifactDescriptor, error: AlpacError) -> FetchOutcome:
        self.stats.failed += 1
        logger.error(f"[错误] '{descriptor.location}' 最终失败: {error}")
        return FetchOutcome(descriptor=descriptor, error=error)

    def get_stats(self) -> FetchStats:
        """获取下载统计"""
        return self.stats
