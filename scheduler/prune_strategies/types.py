"""
清理操作类型定义
"""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class PruneOutcome:
    """单个清理操作的结果"""

    operation: str
    items_deleted: int
    space_reclaimed: int = 0  # 回收字节数（不统计空间的操作为 0）
    summary: str = ""
    execution_time: float = 0.0  # 执行时间（秒）


@dataclass
class CycleReport:
    """一次成功清理周期的汇总"""

    cycle_id: Optional[int]
    outcomes: List[PruneOutcome] = field(default_factory=list)
    execution_time: float = 0.0

    @property
    def total_reclaimed(self) -> int:
        """所有操作回收的总字节数"""
        return sum(outcome.space_reclaimed for outcome in self.outcomes)

    @property
    def summaries(self) -> List[str]:
        return [outcome.summary for outcome in self.outcomes]
