"""
清理观察者 - 执行监控
"""

from abc import ABC, abstractmethod

from loguru import logger

from .types import CycleReport, PruneOutcome


class PruneObserver(ABC):
    """清理观察者接口"""

    @abstractmethod
    def on_prune_executed(self, outcome: PruneOutcome):
        """单个清理操作完成时调用"""
        pass

    @abstractmethod
    def on_prune_failed(self, operation: str, error: BaseException):
        """单个清理操作失败时调用（本周期随即中止）"""
        pass

    @abstractmethod
    def on_cycle_completed(self, report: CycleReport):
        """整个清理周期成功完成时调用"""
        pass


class LoggingObserver(PruneObserver):
    """日志观察者（默认）"""

    def on_prune_executed(self, outcome: PruneOutcome):
        logger.info(outcome.summary)

    def on_prune_failed(self, operation: str, error: BaseException):
        logger.debug(f"✗ [{operation}] Failed: {error}")

    def on_cycle_completed(self, report: CycleReport):
        logger.info(f"Total reclaimed space: {report.total_reclaimed}")


class MetricsObserver(PruneObserver):
    """指标收集观察者（进程内，仅用于统计输出）"""

    def __init__(self):
        self.metrics = {
            "total_operations": 0,
            "total_failures": 0,
            "total_cycles": 0,
            "total_items_deleted": 0,
            "total_space_reclaimed": 0,
        }

    def on_prune_executed(self, outcome: PruneOutcome):
        self.metrics["total_operations"] += 1
        self.metrics["total_items_deleted"] += outcome.items_deleted

    def on_prune_failed(self, operation: str, error: BaseException):
        self.metrics["total_operations"] += 1
        self.metrics["total_failures"] += 1

    def on_cycle_completed(self, report: CycleReport):
        self.metrics["total_cycles"] += 1
        self.metrics["total_space_reclaimed"] += report.total_reclaimed

    def get_metrics(self) -> dict:
        """获取指标"""
        return self.metrics.copy()
