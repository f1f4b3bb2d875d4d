"""
清理策略元数据和装饰器
"""

from dataclasses import dataclass


@dataclass
class StrategyMetadata:
    """策略元数据"""

    priority: int = 100  # 执行顺序（数字越小越先执行）


def strategy_metadata(priority: int = 100):
    """
    策略元数据装饰器

    清理周期按 priority 从小到大依次执行

    使用示例:
        @strategy_metadata(priority=1)
        class ContainerPruneStrategy(BasePruneStrategy):
            pass
    """

    def decorator(cls):
        cls._metadata = StrategyMetadata(priority=priority)
        return cls

    return decorator
