"""
Cycle Scheduler - 清理周期调度器

状态机：IDLE -> PENDING -> RUNNING -> IDLE

架构说明：
- 状态只由协调线程（调用 run_once() 的线程）修改
- 定时器与清理周期线程只向收件箱投递事件，不直接修改状态
- 待处理请求使用容量为 1 的非阻塞队列，多余的请求直接丢弃
- 每个周期的截止时间严格短于调度间隔；超时后只发出取消信号，不等待执行方确认
"""

import queue
import threading
from dataclasses import dataclass
from typing import Any, Optional

from loguru import logger

from core.enums import CycleOutcome, SchedulerState
from core.exceptions import CycleCancelledError
from core.filters import FilterSet
from core.utils.time_utils import format_duration
from scheduler.config import get_scheduler_config
from scheduler.context import DEADLINE_EXCEEDED, CycleContext, CycleExecution
from scheduler.prune_strategies import CleanupExecutor, CycleReport


@dataclass(frozen=True)
class Tick:
    """定时器触发"""


@dataclass(frozen=True)
class Wakeup:
    """唤醒协调线程（停止时使用）"""


@dataclass(frozen=True)
class CycleFinished:
    """清理周期线程结束（成功或失败）"""

    cycle_id: int
    report: Optional[CycleReport] = None
    error: Optional[BaseException] = None


class CycleScheduler:
    """
    清理周期调度器

    保证：
    - 同一时刻最多一个清理周期在执行
    - 待处理请求最多一个，PENDING/RUNNING 时的定时触发被丢弃
    - 失败或超时的周期不会重试，等待下一次定时触发

    使用示例:
        scheduler = CycleScheduler(executor, filters, prune_all=False, interval=86400)
        scheduler.request_cycle()  # 启动时立即执行一次
        while True:
            scheduler.run_once()
    """

    def __init__(
        self,
        executor: CleanupExecutor,
        filters: FilterSet,
        prune_all: bool,
        interval: float,
        cycle_timeout: Optional[float] = None,
    ) -> None:
        """
        Args:
            executor: 清理执行器
            filters: 所有清理操作共享的过滤条件
            prune_all: 是否清理全部未使用镜像
            interval: 调度间隔（秒）
            cycle_timeout: 单次周期截止时长（秒），默认 interval - 1
        """
        if cycle_timeout is None:
            cycle_timeout = interval - 1.0
        if cycle_timeout <= 0 or cycle_timeout >= interval:
            raise ValueError(
                f"cycle timeout must be in (0, {interval}), got {cycle_timeout}"
            )

        self.executor = executor
        self.filters = filters
        self.prune_all = prune_all
        self.interval = interval
        self.cycle_timeout = cycle_timeout

        self._config = get_scheduler_config()
        self._inbox: "queue.Queue[Any]" = queue.Queue()
        self._pending: "queue.Queue[bool]" = queue.Queue(maxsize=1)
        self._state = SchedulerState.IDLE
        self._execution: Optional[CycleExecution] = None
        self._last_execution: Optional[CycleExecution] = None
        self._cycle_seq = 0
        self._stats = {
            "ticks_received": 0,
            "ticks_dropped": 0,
            "cycles_started": 0,
            "cycles_succeeded": 0,
            "cycles_failed": 0,
            "cycles_timed_out": 0,
            "cycles_cancelled": 0,
            "stale_completions": 0,
        }

    # ========================================================================
    # 外部线程可调用
    # ========================================================================

    def tick(self) -> None:
        """投递一次定时触发（定时器线程调用）"""
        self._inbox.put(Tick())

    def wakeup(self) -> None:
        """唤醒阻塞在收件箱上的协调线程"""
        self._inbox.put(Wakeup())

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def current_execution(self) -> Optional[CycleExecution]:
        return self._execution

    @property
    def last_execution(self) -> Optional[CycleExecution]:
        return self._last_execution

    def get_stats(self) -> dict:
        """获取调度统计"""
        stats = dict(self._stats)
        stats["state"] = self._state.value
        return stats

    # ========================================================================
    # 协调线程
    # ========================================================================

    def request_cycle(self) -> bool:
        """
        请求执行一次清理周期

        非阻塞：已有待处理请求或周期正在执行时直接丢弃

        Returns:
            True 如果请求被接受
        """
        if self._state is SchedulerState.RUNNING:
            logger.debug("Cleanup already running, request dropped")
            return False

        try:
            self._pending.put_nowait(True)
        except queue.Full:
            logger.debug("Cleanup already pending, request dropped")
            return False

        self._state = SchedulerState.PENDING
        return True

    def run_once(self, timeout: Optional[float] = None) -> bool:
        """
        处理一个事件：待处理请求、定时触发、周期结束或截止时间到达

        Args:
            timeout: 最长等待时间（秒），None 表示一直等待

        Returns:
            True 如果处理了事件，False 如果等待超时
        """
        if self._state is SchedulerState.PENDING:
            try:
                self._pending.get_nowait()
            except queue.Empty:
                self._state = SchedulerState.IDLE
            else:
                self._start_cycle()
                return True

        wait = timeout
        if self._execution is not None:
            remaining = self._execution.context.remaining()
            wait = remaining if wait is None else min(wait, remaining)

        try:
            event = self._inbox.get(timeout=wait)
        except queue.Empty:
            if self._execution is not None and self._execution.context.expired():
                self._on_deadline()
                return True
            return False

        self._dispatch(event)
        return True

    def cancel_current(self, reason: str = "cancelled") -> None:
        """
        取消正在执行的周期并回到 IDLE（停止时调用）

        不等待清理线程确认
        """
        execution = self._execution
        if execution is None:
            return

        execution.context.cancel(reason)
        logger.warning(f"🛑 Cleanup cycle #{execution.cycle_id} {reason}")
        self._stats["cycles_cancelled"] += 1
        self._finish(CycleOutcome.CANCELLED)

    def _dispatch(self, event: Any) -> None:
        if isinstance(event, Tick):
            self._on_tick()
        elif isinstance(event, CycleFinished):
            self._on_cycle_finished(event)
        elif isinstance(event, Wakeup):
            pass
        else:
            logger.warning(f"Unknown scheduler event: {event!r}")

    def _on_tick(self) -> None:
        self._stats["ticks_received"] += 1

        if self._state is SchedulerState.IDLE:
            self.request_cycle()
            return

        self._stats["ticks_dropped"] += 1
        logger.debug(f"Tick ignored, scheduler is {self._state.value}")

    def _start_cycle(self) -> None:
        self._cycle_seq += 1
        context = CycleContext(cycle_id=self._cycle_seq, timeout=self.cycle_timeout)
        execution = CycleExecution(context=context)

        execution.thread = threading.Thread(
            target=self._run_cycle,
            args=(context,),
            name=f"{self._config.CYCLE_THREAD_PREFIX}-{context.cycle_id}",
            daemon=True,
        )

        self._execution = execution
        self._state = SchedulerState.RUNNING
        self._stats["cycles_started"] += 1

        logger.info(
            f"🧹 Start cleaning up unused data (cycle #{context.cycle_id}, "
            f"deadline in {format_duration(self.cycle_timeout)})"
        )
        execution.thread.start()

    def _run_cycle(self, context: CycleContext) -> None:
        """清理周期线程入口，结果通过收件箱交回协调线程"""
        try:
            report = self.executor.run_cycle(context, self.filters, self.prune_all)
        except Exception as e:
            self._inbox.put(CycleFinished(cycle_id=context.cycle_id, error=e))
        else:
            self._inbox.put(CycleFinished(cycle_id=context.cycle_id, report=report))

    def _on_cycle_finished(self, event: CycleFinished) -> None:
        execution = self._execution
        if execution is None or execution.cycle_id != event.cycle_id:
            # 已放弃的周期，结果丢弃
            self._stats["stale_completions"] += 1
            logger.debug(f"Discarding result of abandoned cycle #{event.cycle_id}")
            return

        elapsed = format_duration(round(execution.context.elapsed(), 3))

        if event.error is None:
            execution.total_reclaimed = event.report.total_reclaimed
            self._stats["cycles_succeeded"] += 1
            logger.info(f"✅ Finished cleaning (cycle #{event.cycle_id}, took {elapsed})")
            self._finish(CycleOutcome.SUCCEEDED)
        elif isinstance(event.error, CycleCancelledError):
            execution.error = event.error
            self._stats["cycles_timed_out"] += 1
            logger.warning(f"⏰ {event.error}")
            self._finish(CycleOutcome.TIMED_OUT)
        else:
            execution.error = event.error
            self._stats["cycles_failed"] += 1
            logger.error(f"❌ Cleanup cycle #{event.cycle_id} failed: {event.error}")
            self._finish(CycleOutcome.FAILED)

    def _on_deadline(self) -> None:
        execution = self._execution
        execution.context.cancel(DEADLINE_EXCEEDED)
        self._stats["cycles_timed_out"] += 1
        logger.warning(
            f"⏰ Cleanup cycle #{execution.cycle_id} {DEADLINE_EXCEEDED} "
            f"({format_duration(self.cycle_timeout)}), abandoning it"
        )
        self._finish(CycleOutcome.TIMED_OUT)

    def _finish(self, outcome: CycleOutcome) -> None:
        self._execution.outcome = outcome
        self._last_execution = self._execution
        self._execution = None
        self._state = SchedulerState.IDLE
