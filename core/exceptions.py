"""
Docker Janitor 的自定义异常
"""
from typing import Any, Optional


class DockerJanitorException(Exception):
    """Docker Janitor 基础异常类"""
    pass


# ========== 配置异常 ==========

class ConfigurationException(DockerJanitorException):
    """配置相关异常基类"""
    pass


class InvalidConfigException(ConfigurationException):
    """无效的配置异常"""
    def __init__(self, key: str, value: Any, reason: str):
        self.key = key
        self.value = value
        self.reason = reason
        super().__init__(
            f"Invalid configuration: {key}={value} - {reason}"
        )


class FilterParseException(InvalidConfigException):
    """过滤条件格式错误（应为 key=value）"""
    def __init__(self, argument: str):
        self.argument = argument
        super().__init__("filter", argument, "bad format of filter (expected name=value)")


class DurationParseException(InvalidConfigException, ValueError):
    """时长格式错误（同时是 ValueError，pydantic 校验器可直接抛出）"""
    def __init__(self, key: str, value: str):
        super().__init__(key, value, "invalid duration (e.g. 24h, 1h30m, 90s)")


# ========== Docker 引擎异常 ==========

class EngineException(DockerJanitorException):
    """Docker 引擎相关异常基类"""
    pass


class EngineNotInitializedException(EngineException):
    """Docker 客户端未初始化异常"""
    def __init__(self):
        super().__init__(
            "DockerManager not initialized. Call init() first."
        )


class EngineConnectionException(EngineException):
    """Docker 引擎连接异常"""
    def __init__(self, detail: str):
        super().__init__(f"Docker engine connection error: {detail}")


# ========== 清理周期异常 ==========

class CycleException(DockerJanitorException):
    """清理周期相关异常基类"""
    pass


class PruneOperationError(CycleException):
    """单个清理操作失败，中止本次清理周期"""
    def __init__(self, operation: str, cause: BaseException):
        self.operation = operation
        self.cause = cause
        super().__init__(f"{operation} prune failed: {cause}")


class CycleCancelledError(CycleException):
    """清理周期被取消（超时或停止）"""
    def __init__(self, cycle_id: Optional[int] = None, reason: str = "cancelled"):
        self.cycle_id = cycle_id
        self.reason = reason
        label = f"cycle #{cycle_id}" if cycle_id is not None else "cycle"
        super().__init__(f"Cleanup {label} {reason}")
