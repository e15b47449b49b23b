"""
传输层

把下载地址变成按顺序产出的字节块流。传输失败统一包装为 TransportFailure，
超时和取消由这里负责，校验核心不关心。
"""

import asyncio
from abc import ABC, abstractmethod
from typing import AsyncIterator, Dict, Optional
from urllib.parse import unquote, urlparse
from urllib.request import url2pathname

import aiofiles
import aiohttp
from loguru import logger

from alpac.config import FetchSettings
from alpac.exceptions import TransportFailure


class Transport(ABC):
    """字节流传输接口"""

    @abstractmethod
    def stream(self, url: str) -> AsyncIterator[bytes]:
        """按接收顺序产出数据块，失败时抛出 TransportFailure"""

    async def close(self) -> None:
        """释放传输占用的资源"""

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()


class HttpTransport(Transport):
    """基于 aiohttp 的 HTTP(S) 传输"""

    def __init__(
        self,
        settings: Optional[FetchSettings] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.settings = settings or FetchSettings()
        self._session = session
        self._owned_session = session is None

    @property
    def session(self) -> aiohttp.ClientSession:
        """获取或创建 aiohttp session"""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.settings.timeout),
                headers={"User-Agent": self.settings.user_agent},
            )
            self._owned_session = True
        return self._session

    async def stream(self, url: str) -> AsyncIterator[bytes]:
        try:
            async with self.session.get(url) as response:
                if response.status != 200:
                    raise TransportFailure(
                        f"HTTP {response.status}",
                        context={"url": url, "status": response.status},
                    )
                length = response.headers.get("Content-Length")
                if length:
                    logger.debug(f"[信息] Content-Length: {length}")
                async for chunk in response.content.iter_chunked(
                    self.settings.chunk_size
                ):
                    yield chunk
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TransportFailure(
                f"请求失败: {e.__class__.__name__}: {e}", context={"url": url}
            ) from e

    async def close(self) -> None:
        if self._owned_session and self._session and not self._session.closed:
            await self._session.close()


class FileTransport(Transport):
    """读取 file:// 地址的本地文件"""

    def __init__(self, settings: Optional[FetchSettings] = None):
        self.settings = settings or FetchSettings()

    async def stream(self, url: str) -> AsyncIterator[bytes]:
        path = url2pathname(unquote(urlparse(url).path))
        try:
            async with aiofiles.open(path, "rb") as f:
                while True:
                    data = await f.read(self.settings.chunk_size)
                    if not data:
                        break
                    yield data
        except OSError as e:
            raise TransportFailure(
                f"无法读取本地文件: {e}", context={"url": url, "path": path}
            ) from e


class DefaultTransport(Transport):
    """按地址协议选择传输方式"""

    def __init__(self, settings: Optional[FetchSettings] = None):
        self.settings = settings or FetchSettings()
        http = HttpTransport(self.settings)
        self._transports: Dict[str, Transport] = {
            "http": http,
            "https": http,
            "file": FileTransport(self.settings),
        }

    def stream(self, url: str) -> AsyncIterator[bytes]:
        scheme = urlparse(url).scheme.lower()
        transport = self._transports.get(scheme)
        if transport is None:
            raise TransportFailure(
                f"不支持的协议: {scheme}", context={"url": url, "scheme": scheme}
            )
        return transport.stream(url)

    async def close(self) -> None:
        for transport in set(self._transports.values()):
            await transport.close()
