"""
Alpac 下载层

包含传输、流式校验、单文件下载与批量下载管理。
"""

from alpac.download.fetcher import Fetcher
from alpac.download.manager import FetchManager, FetchOutcome, FetchStats
from alpac.download.transport import (
    DefaultTransport,
    FileTransport,
    HttpTransport,
    Transport,
)
from alpac.download.verifier import DigestCheck, Verdict, Verifier

__all__ = [
    "Fetcher",
    "FetchManager",
    "FetchOutcome",
    "FetchStats",
    "Transport",
    "HttpTransport",
    "FileTransport",
    "DefaultTransport",
    "Verifier",
    "Verdict",
    "DigestCheck",
]
