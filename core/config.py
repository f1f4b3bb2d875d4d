"""
使用 Pydantic Settings 进行配置管理
从 app.properties 文件和环境变量加载配置，命令行参数可覆盖
"""

import json
from functools import lru_cache
from typing import Annotated, Any, List, Optional
from pathlib import Path

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict
from loguru import logger

from core.utils.time_utils import parse_duration


class Settings(BaseSettings):
    """应用配置，包含参数校验"""

    # 清理周期配置
    PRUNE_INTERVAL: str = Field(default="24h", description="清理周期（如 24h、1h30m）")
    CYCLE_DEADLINE_MARGIN: float = Field(
        default=1.0, description="单次清理截止时间相对周期提前的秒数"
    )

    # 清理范围配置
    # NoDecode：环境变量按原样交给 validate_prune_filters，不做 JSON 预解析
    PRUNE_FILTERS: Annotated[List[str], NoDecode] = Field(
        default_factory=list, description="过滤条件列表（key=value，可用逗号连接）"
    )
    PRUNE_ALL: bool = Field(default=False, description="是否清理全部未使用镜像")

    # Docker 客户端配置
    DOCKER_TIMEOUT: int = Field(default=60, description="Docker API 请求超时（秒）")

    # 日志配置
    LOG_LEVEL: str = Field(default="INFO", description="日志级别")
    LOG_FILE: Optional[str] = Field(default=None, description="日志文件路径")

    model_config = SettingsConfigDict(
        env_file="app.properties",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @field_validator("PRUNE_FILTERS", mode="before")
    @classmethod
    def validate_prune_filters(cls, v: Any) -> Any:
        """
        环境变量 / app.properties 中的 PRUNE_FILTERS 支持两种写法：
        JSON 列表 ["label=a", "until=24h"] 或普通字符串 label=a,until=24h
        """
        if not isinstance(v, str):
            return v
        text = v.strip()
        if not text:
            return []
        if text.startswith("["):
            # 格式错误时 JSONDecodeError（ValueError）转换为 ValidationError
            return json.loads(text)
        return [text]

    @field_validator("PRUNE_INTERVAL")
    @classmethod
    def validate_prune_interval(cls, v: str) -> str:
        # 解析失败时抛出 ValueError，由 pydantic 转换为 ValidationError
        parse_duration(v)
        return v.strip()

    @field_validator("CYCLE_DEADLINE_MARGIN")
    @classmethod
    def validate_deadline_margin(cls, v: float) -> float:
        if v < 0:
            raise ValueError("CYCLE_DEADLINE_MARGIN 不能为负数")
        return v

    @field_validator("DOCKER_TIMEOUT")
    @classmethod
    def validate_docker_timeout(cls, v: int) -> int:
        if v < 1:
            raise ValueError("DOCKER_TIMEOUT 至少为 1")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"LOG_LEVEL 必须为 {valid_levels} 中的一项")
        return v_upper

    @model_validator(mode="after")
    def validate_interval_exceeds_margin(self) -> "Settings":
        if self.interval_seconds <= self.CYCLE_DEADLINE_MARGIN:
            raise ValueError(
                f"PRUNE_INTERVAL ({self.PRUNE_INTERVAL}) 必须大于 "
                f"CYCLE_DEADLINE_MARGIN ({self.CYCLE_DEADLINE_MARGIN}s)"
            )
        return self

    @property
    def interval_seconds(self) -> float:
        """清理周期（秒）"""
        return parse_duration(self.PRUNE_INTERVAL)

    @property
    def cycle_timeout_seconds(self) -> float:
        """
        单次清理的截止时长（秒）

        严格小于周期，保证失控的清理不会延续到下一次触发
        """
        return self.interval_seconds - self.CYCLE_DEADLINE_MARGIN

    def ensure_directories(self) -> None:
        """确保日志目录存在"""
        if self.LOG_FILE:
            Path(self.LOG_FILE).parent.mkdir(parents=True, exist_ok=True)


# ========== 配置获取函数 ==========


@lru_cache()
def get_settings() -> Settings:
    """
    获取配置实例（单例）

    返回:
        配置实例
    """
    settings = Settings()
    logger.debug("Settings loaded")
    return settings


def reload_settings() -> Settings:
    """
    重新加载配置

    清除 lru_cache 缓存并重新加载配置

    返回:
        新的配置实例
    """
    get_settings.cache_clear()
    logger.debug("Settings reloaded")
    return get_settings()
