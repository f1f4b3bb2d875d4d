"""
清理执行器

按固定顺序执行所有清理策略，汇总回收空间，遇到第一个错误立即中止
"""

import time
from typing import Any, Dict, List, Optional

from loguru import logger

from core.exceptions import CycleCancelledError
from core.filters import FilterSet
from scheduler.context import CycleContext

from .base import BasePruneStrategy, get_strategy_registry
from .observers import LoggingObserver, PruneObserver
from .types import CycleReport, PruneOutcome


class CleanupExecutor:
    """
    清理执行器

    特性：
    - 自动从注册表加载策略
    - 按元数据优先级排序（带缓存）
    - 支持观察者模式（日志、指标）
    - 快速失败：任一操作失败即中止本周期，不回滚、不重试
    """

    def __init__(self, client: Any, observers: List[PruneObserver] = None):
        """
        Args:
            client: docker.DockerClient（只读共享）
            observers: 清理观察者列表（默认仅 LoggingObserver）
        """
        self.client = client
        self.strategies: Dict[str, BasePruneStrategy] = {}
        self.observers: List[PruneObserver] = observers or [LoggingObserver()]

        self._sorted_strategies_cache: Optional[List[BasePruneStrategy]] = None

    def register(self, strategy: BasePruneStrategy):
        """注册清理策略（同名策略会被替换）"""
        self.strategies[strategy.name] = strategy
        self._sorted_strategies_cache = None
        logger.debug(f"Registered prune strategy: {strategy.name} - {strategy.description}")

    def auto_register_all(self):
        """自动注册所有已定义的策略类"""
        for strategy_cls in get_strategy_registry().values():
            self.register(strategy_cls())

    def list_strategies(self) -> List[BasePruneStrategy]:
        """列出所有策略（按执行顺序）"""
        if self._sorted_strategies_cache is None:
            self._sorted_strategies_cache = sorted(
                self.strategies.values(),
                key=lambda s: s._get_metadata().priority,
            )
        return list(self._sorted_strategies_cache)

    def run_cycle(
        self,
        context: CycleContext,
        filters: FilterSet,
        prune_all: bool = False,
    ) -> CycleReport:
        """
        执行一次清理周期

        Args:
            context: 清理周期上下文（截止时间与取消信号）
            filters: 所有操作共享的过滤条件
            prune_all: 为 False 时镜像清理只删除悬空镜像

        Returns:
            清理周期汇总

        Raises:
            PruneOperationError: 第一个失败的操作（后续操作不再执行）
            CycleCancelledError: 上下文被取消或超时
        """
        start_time = time.time()
        report = CycleReport(cycle_id=context.cycle_id)

        for strategy in self.list_strategies():
            try:
                outcome = strategy.execute(self.client, context, filters, prune_all)
            except CycleCancelledError:
                raise
            except Exception as e:
                self._notify_failed(strategy.name, e)
                raise

            report.outcomes.append(outcome)
            self._notify_executed(outcome)

        report.execution_time = time.time() - start_time
        self._notify_completed(report)
        return report

    def _notify_executed(self, outcome: PruneOutcome):
        for observer in self.observers:
            observer.on_prune_executed(outcome)

    def _notify_failed(self, operation: str, error: BaseException):
        for observer in self.observers:
            observer.on_prune_failed(operation, error)

    def _notify_completed(self, report: CycleReport):
        for observer in self.observers:
            observer.on_cycle_completed(report)


def create_default_executor(
    client: Any,
    observers: List[PruneObserver] = None,
) -> CleanupExecutor:
    """
    创建注册了全部默认策略的执行器

    Args:
        client: docker.DockerClient
        observers: 观察者列表（默认包含 LoggingObserver）

    Returns:
        清理执行器实例
    """
    # 导入以触发策略自动注册
    from . import strategies  # noqa: F401

    executor = CleanupExecutor(client, observers=observers)
    executor.auto_register_all()
    return executor
