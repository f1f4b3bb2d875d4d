"""
调度器模块配置
统一管理调度循环的内部参数（非用户配置项）
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class SchedulerConfig:
    """调度器配置类"""

    # 协调循环配置
    COORDINATOR_POLL_INTERVAL: float = 1.0  # 空闲时重新检查停止标志的间隔（秒）

    # 清理周期线程配置
    CYCLE_THREAD_PREFIX: str = "PruneCycle"  # 清理周期线程名前缀

    # 守护进程配置
    DAEMON_THREAD_JOIN_TIMEOUT: float = 10.0  # 守护线程关闭超时（秒）


# 全局配置实例
_scheduler_config: Optional[SchedulerConfig] = None


def get_scheduler_config() -> SchedulerConfig:
    """
    获取调度器配置实例（单例）

    Returns:
        SchedulerConfig 实例
    """
    global _scheduler_config
    if _scheduler_config is None:
        _scheduler_config = SchedulerConfig()
    return _scheduler_config


def set_scheduler_config(config: SchedulerConfig) -> None:
    """
    设置调度器配置实例

    Args:
        config: SchedulerConfig 实例
    """
    global _scheduler_config
    _scheduler_config = config
