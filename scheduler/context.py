"""
Cycle Context - 清理周期上下文

携带截止时间的可取消上下文，在协调线程与清理周期线程之间共享
"""

import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Optional

from core.enums import CycleOutcome
from core.exceptions import CycleCancelledError


DEADLINE_EXCEEDED = "exceeded its deadline"


@dataclass
class CycleContext:
    """
    清理周期上下文

    取消是协作式的：调用 cancel() 只设置标志，
    清理操作在每个步骤前后检查 raise_if_cancelled()
    """

    cycle_id: int
    timeout: float
    clock: Callable[[], float] = time.monotonic
    _started: float = field(init=False)
    _cancel_event: threading.Event = field(default_factory=threading.Event, init=False)
    _reason: Optional[str] = field(default=None, init=False)

    def __post_init__(self) -> None:
        self._started = self.clock()

    @property
    def deadline(self) -> float:
        """截止时间（clock 时间轴上的绝对值）"""
        return self._started + self.timeout

    def remaining(self) -> float:
        """距截止时间剩余的秒数（不小于 0）"""
        return max(0.0, self.deadline - self.clock())

    def elapsed(self) -> float:
        """已执行的秒数"""
        return self.clock() - self._started

    def expired(self) -> bool:
        """是否已超过截止时间"""
        return self.clock() >= self.deadline

    def cancel(self, reason: str = "cancelled") -> None:
        """发出取消信号（不等待执行方确认）"""
        if not self._cancel_event.is_set():
            self._reason = reason
            self._cancel_event.set()

    @property
    def cancelled(self) -> bool:
        """是否已取消（包括超过截止时间）"""
        if self._cancel_event.is_set():
            return True
        if self.expired():
            self.cancel(DEADLINE_EXCEEDED)
            return True
        return False

    @property
    def reason(self) -> Optional[str]:
        return self._reason

    def raise_if_cancelled(self) -> None:
        """
        如果已取消则抛出异常

        Raises:
            CycleCancelledError: 上下文已取消或已超时
        """
        if self.cancelled:
            raise CycleCancelledError(self.cycle_id, self._reason or "cancelled")

    def wait(self, timeout: Optional[float] = None) -> bool:
        """
        等待取消信号

        Returns:
            True 如果在超时前被取消
        """
        return self._cancel_event.wait(timeout)


@dataclass
class CycleExecution:
    """运行中的清理周期（协调线程独占）"""

    context: CycleContext
    thread: Optional[threading.Thread] = None
    outcome: CycleOutcome = CycleOutcome.PENDING
    total_reclaimed: Optional[int] = None
    error: Optional[BaseException] = None

    @property
    def cycle_id(self) -> int:
        return self.context.cycle_id
