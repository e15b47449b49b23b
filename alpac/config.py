"""
运行配置

下载器的分块大小、超时、并发与重试设置，可从环境变量读取。
"""

import os
from dataclasses import dataclass, field, fields, replace

from loguru import logger

from alpac import __version__

_ENV_PREFIX = "ALPAC_"


@dataclass(frozen=True)
class FetchSettings:
    """下载设置"""

    chunk_size: int = 8192
    timeout: float = 300.0
    max_concurrent: int = 5
    max_retries: int = 0
    retry_delay: float = 1.0
    user_agent: str = field(default=f"alpac/{__version__}")

    @classmethod
    def from_env(cls) -> "FetchSettings":
        """
        从环境变量读取设置

        支持 ALPAC_CHUNK_SIZE、ALPAC_TIMEOUT、ALPAC_MAX_CONCURRENT、
        ALPAC_MAX_RETRIES。无效值会被忽略并保留默认值。
        """
        settings = cls()
        overrides = {}
        for f in fields(cls):
            if f.name in ("user_agent", "retry_delay"):
                continue
            raw = os.environ.get(_ENV_PREFIX + f.name.upper())
            if raw is None:
                continue
            cast = float if f.name == "timeout" else int
            try:
                value = cast(raw)
            except ValueError:
                logger.warning(f"[警告] {_ENV_PREFIX}{f.name.upper()}={raw!r} 无效，使用默认值")
                continue
            if value < 0 or (value == 0 and f.name in ("chunk_size", "max_concurrent")):
                logger.warning(f"[警告] {_ENV_PREFIX}{f.name.upper()}={raw!r} 超出范围，使用默认值")
                continue
            overrides[f.name] = value
        return replace(settings, **overrides)

    def with_overrides(self, **kwargs) -> "FetchSettings":
        """返回覆盖了非 None 参数的新设置"""
        return replace(self, **{k: v for k, v in kwargs.items() if v is not None})
