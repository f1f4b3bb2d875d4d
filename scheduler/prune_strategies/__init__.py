"""
清理策略模块

- BasePruneStrategy: 抽象基类，定义清理策略接口，自动注册子类
- 具体策略类: 容器、镜像、网络、卷各一个，按优先级顺序执行
- CleanupExecutor: 执行器，按顺序执行一次清理周期并汇总结果
- 观察者: 日志输出与指标统计
"""

# 导入策略类以触发自动注册
from .strategies import (
    ContainerPruneStrategy,
    ImagePruneStrategy,
    NetworkPruneStrategy,
    VolumePruneStrategy,
)

from .base import BasePruneStrategy, get_strategy_registry
from .executor import CleanupExecutor, create_default_executor
from .metadata import StrategyMetadata, strategy_metadata
from .observers import LoggingObserver, MetricsObserver, PruneObserver
from .types import CycleReport, PruneOutcome

__all__ = [
    # 基类和接口
    "BasePruneStrategy",
    "PruneOutcome",
    "CycleReport",
    "StrategyMetadata",
    "strategy_metadata",
    "get_strategy_registry",
    # 观察者
    "PruneObserver",
    "LoggingObserver",
    "MetricsObserver",
    # 执行器
    "CleanupExecutor",
    "create_default_executor",
    # 具体策略
    "ContainerPruneStrategy",
    "ImagePruneStrategy",
    "NetworkPruneStrategy",
    "VolumePruneStrategy",
]
