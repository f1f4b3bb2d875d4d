"""
守护线程基类、定时触发线程和调度器守护进程
"""

import threading
from abc import ABC, abstractmethod

from loguru import logger

from core.utils.time_utils import format_duration
from scheduler.config import get_scheduler_config
from scheduler.scheduler import CycleScheduler


class DaemonThread(threading.Thread, ABC):
    """
    守护线程基类

    提供标准的守护线程功能：
    - 启动/停止控制
    - 上下文管理器支持
    - on_start() / on_stop() 生命周期钩子
    """

    def __init__(
        self,
        name: str,
        check_interval: float = 5.0,
        run_immediately: bool = True,
    ) -> None:
        """
        Args:
            name: 线程名称
            check_interval: 检查间隔（秒），为 0 时 do_work 自行控制节奏
            run_immediately: 为 False 时先等待一个间隔再执行第一次
        """
        super().__init__(daemon=True, name=name)
        self.check_interval = check_interval
        self.run_immediately = run_immediately
        self._stop_event = threading.Event()
        self._daemon_started = False

    def __enter__(self) -> "DaemonThread":
        self.start()
        self._daemon_started = True
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        if self._daemon_started:
            self.stop()
            self.join(timeout=get_scheduler_config().DAEMON_THREAD_JOIN_TIMEOUT)
        return False

    @abstractmethod
    def do_work(self) -> None:
        """
        执行实际工作（子类实现）

        此方法会在循环中被调用
        """
        pass

    def on_start(self) -> None:
        """主循环开始前调用"""

    def on_stop(self) -> None:
        """主循环结束后调用（异常退出时同样调用）"""

    def run(self) -> None:
        """主循环"""
        logger.debug(f"{self.name} started")
        self.on_start()

        try:
            if not self.run_immediately:
                self._stop_event.wait(self.check_interval)

            while not self._stop_event.is_set():
                try:
                    self.do_work()
                except Exception as e:
                    logger.exception(f"❌ {self.name} error: {e}")

                self._stop_event.wait(self.check_interval)
        finally:
            self.on_stop()

        logger.debug(f"{self.name} stopped")

    def stop(self) -> None:
        """停止守护线程"""
        self._stop_event.set()

    @property
    def is_running(self) -> bool:
        """检查是否正在运行"""
        return self.is_alive() and not self._stop_event.is_set()


class IntervalTicker(DaemonThread):
    """
    定时触发线程

    每隔 interval 向调度器投递一次触发；启动时不触发
    """

    def __init__(self, scheduler: CycleScheduler, interval: float) -> None:
        super().__init__(name="IntervalTicker", check_interval=interval, run_immediately=False)
        self.scheduler = scheduler

    def do_work(self) -> None:
        self.scheduler.tick()


class SchedulerDaemon(DaemonThread):
    """
    调度器守护进程

    驱动 CycleScheduler 的协调循环：启动时立即请求一次清理，
    之后由 IntervalTicker 按间隔触发；每轮循环由 run_once() 阻塞等待事件

    使用示例:
        with SchedulerDaemon(scheduler) as daemon:
            ...  # 自动启动和清理
    """

    def __init__(self, scheduler: CycleScheduler, ticker: IntervalTicker = None) -> None:
        super().__init__(name="SchedulerDaemon", check_interval=0)
        self.scheduler = scheduler
        self.ticker = ticker or IntervalTicker(scheduler, scheduler.interval)
        self._config = get_scheduler_config()

    def on_start(self) -> None:
        logger.info(
            f"🚀 {self.name} started (interval: {format_duration(self.scheduler.interval)}, "
            f"filters: {self.scheduler.filters}, all: {self.scheduler.prune_all})"
        )
        self.scheduler.request_cycle()
        self.ticker.start()

    def do_work(self) -> None:
        self.scheduler.run_once(timeout=self._config.COORDINATOR_POLL_INTERVAL)

    def on_stop(self) -> None:
        self.ticker.stop()
        if self.ticker.is_alive():
            self.ticker.join(timeout=self._config.DAEMON_THREAD_JOIN_TIMEOUT)
        self.scheduler.cancel_current("cancelled by shutdown")
        self._log_stats()
        logger.info(f"🛑 {self.name} stopped")

    def stop(self) -> None:
        """停止协调循环并唤醒协调线程"""
        super().stop()
        self.scheduler.wakeup()

    def _log_stats(self) -> None:
        stats = self.scheduler.get_stats()
        logger.info(
            f"📊 Cycles: {stats['cycles_started']} started, "
            f"{stats['cycles_succeeded']} succeeded, {stats['cycles_failed']} failed, "
            f"{stats['cycles_timed_out']} timed out; "
            f"ticks: {stats['ticks_received']} received, {stats['ticks_dropped']} dropped"
        )
