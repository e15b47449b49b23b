"""
Alpac 统一异常体系

提供分层的异常结构，支持错误代码、上下文信息和 JSON 序列化。
调用方可以区分配置错误、版本解析错误、传输错误和完整性校验失败。
"""

from typing import Any, Dict, Optional


class AlpacError(Exception):
    """Alpac 基础异常类"""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self._get_default_code()
        self.context = context or {}

    def _get_default_code(self) -> str:
        """获取默认错误代码"""
        return "E000"

    def to_dict(self) -> Dict[str, Any]:
        """将异常转换为字典格式"""
        return {
            "error": True,
            "code": self.code,
            "message": self.message,
            "context": self.context,
            "type": self.__class__.__name__,
        }

    def __str__(self) -> str:
        if self.code:
            return f"[{self.code}] {self.message}"
        return self.message


class ConfigurationError(AlpacError):
    """配置相关错误（例如无效的摘要编码）"""

    def _get_default_code(self) -> str:
        return "E100"


class MalformedLocation(ConfigurationError):
    """无法从中得到文件名的下载地址"""

    def _get_default_code(self) -> str:
        return "E101"


class RecipeParseError(ConfigurationError):
    """配方文件解析错误"""

    def _get_default_code(self) -> str:
        return "E102"


class DuplicateTarget(ConfigurationError):
    """多个下载源会保存为同一个文件"""

    def _get_default_code(self) -> str:
        return "E103"


class ResolutionError(AlpacError):
    """版本解析错误"""

    def _get_default_code(self) -> str:
        return "E200"


class UnknownVersion(ResolutionError):
    """配方中不存在请求的版本"""

    def _get_default_code(self) -> str:
        return "E201"


class NoVersionsAvailable(ResolutionError):
    """配方没有定义任何版本"""

    def _get_default_code(self) -> str:
        return "E202"


class FetchError(AlpacError):
    """下载相关错误"""

    def _get_default_code(self) -> str:
        return "E300"


class TransportFailure(FetchError):
    """传输层错误"""

    def _get_default_code(self) -> str:
        return "E301"


class IntegrityMismatch(FetchError):
    """下载内容与预期摘要不一致"""

    def _get_default_code(self) -> str:
        return "E302"


class PersistError(FetchError):
    """保存已校验文件失败"""

    def _get_default_code(self) -> str:
        return "E303"


class SessionConsumedError(AlpacError):
    """校验会话已结束，不能再次使用"""

    def _get_default_code(self) -> str:
        return "E400"


__all__ = [
    # 基础异常
    "AlpacError",
    # 配置异常
    "ConfigurationError",
    "MalformedLocation",
    "RecipeParseError",
    "DuplicateTarget",
    # 版本解析异常
    "ResolutionError",
    "UnknownVersion",
    "NoVersionsAvailable",
    # 下载异常
    "FetchError",
    "TransportFailure",
    "IntegrityMismatch",
    "PersistError",
    # 校验会话异常
    "SessionConsumedError",
]
