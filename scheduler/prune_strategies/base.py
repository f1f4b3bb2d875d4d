"""
清理策略基类
"""

import time
from abc import ABC, abstractmethod
from typing import Any, Dict, List

from loguru import logger

from core.enums import PruneTarget
from core.exceptions import PruneOperationError
from core.filters import FilterSet
from scheduler.context import CycleContext

from .metadata import StrategyMetadata
from .types import PruneOutcome

# 全局策略注册表（类级别）
_strategy_registry: dict = {}


class BasePruneStrategy(ABC):
    """
    清理策略基类

    特性：
    - 自动注册（__init_subclass__）
    - 元数据支持（装饰器，决定执行顺序）
    - 模板方法（统一执行流程：取消检查、过滤条件、异常包装、计时）

    子类只需声明 target 并实现 _do_prune()
    """

    target: PruneTarget

    def __init_subclass__(cls, **kwargs):
        """子类定义时自动调用，实现自动注册"""
        super().__init_subclass__(**kwargs)

        # 只注册非抽象的具体策略类
        if not getattr(cls, "__abstractmethods__", None):
            _strategy_registry[cls.__name__] = cls

            if not hasattr(cls, "_metadata"):
                cls._metadata = StrategyMetadata()

            logger.debug(f"Auto-registered strategy: {cls.__name__}")

    def _get_metadata(self) -> StrategyMetadata:
        """获取策略元数据"""
        return getattr(self.__class__, "_metadata", StrategyMetadata())

    @property
    def name(self) -> str:
        """策略名称"""
        return self.target.value

    @property
    @abstractmethod
    def description(self) -> str:
        """策略描述"""
        pass

    def build_filters(self, filters: FilterSet, prune_all: bool) -> FilterSet:
        """
        计算本操作实际使用的过滤条件

        默认原样使用周期共享的 FilterSet；需要追加条件的子类返回新实例

        Args:
            filters: 周期共享的过滤条件
            prune_all: 是否清理全部未使用镜像
        """
        return filters

    @abstractmethod
    def _do_prune(self, client: Any, filters: Dict[str, List[str]]) -> PruneOutcome:
        """
        调用 Docker 引擎执行清理（子类实现）

        Args:
            client: docker.DockerClient
            filters: docker SDK 格式的过滤条件

        Returns:
            清理结果
        """
        pass

    def execute(
        self,
        client: Any,
        context: CycleContext,
        filters: FilterSet,
        prune_all: bool,
    ) -> PruneOutcome:
        """
        执行清理（模板方法）

        Args:
            client: docker.DockerClient
            context: 清理周期上下文
            filters: 周期共享的过滤条件
            prune_all: 是否清理全部未使用镜像

        Returns:
            清理结果

        Raises:
            CycleCancelledError: 上下文已取消或已超时
            PruneOperationError: 引擎调用失败
        """
        context.raise_if_cancelled()

        applied = self.build_filters(filters, prune_all)
        logger.debug(f"[{self.name}] Pruning with filters {applied}")

        start_time = time.time()
        try:
            outcome = self._do_prune(client, applied.to_docker())
        except Exception as e:
            raise PruneOperationError(self.name, e) from e

        # 调用期间被取消时丢弃结果
        context.raise_if_cancelled()

        outcome.execution_time = time.time() - start_time
        return outcome


def get_strategy_registry() -> dict:
    """获取策略注册表（用于执行器）"""
    return _strategy_registry
