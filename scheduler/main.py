"""
Docker Janitor - 主入口

定期清理 Docker 引擎中未使用的资源：
1. 已停止的容器
2. 悬空（或全部未使用的）镜像
3. 未使用的网络
4. 未挂载的卷
"""

import argparse
import sys
import threading
from typing import List, Optional

from loguru import logger
from pydantic import ValidationError
from pydantic_settings import SettingsError

from core.config import Settings
from core.docker_client import docker_manager
from core.exceptions import EngineConnectionException, EngineException, FilterParseException
from core.filters import FilterSet
from core.utils.logger import setup_logger
from core.utils.time_utils import format_duration

from scheduler import __version__
from scheduler.config import get_scheduler_config
from scheduler.daemon import SchedulerDaemon
from scheduler.prune_strategies import LoggingObserver, MetricsObserver, create_default_executor
from scheduler.scheduler import CycleScheduler
from scheduler.signal_handler import SignalHandler


def build_parser() -> argparse.ArgumentParser:
    """构建命令行解析器"""
    parser = argparse.ArgumentParser(
        prog="docker-janitor",
        description="Periodically prune unused Docker containers, images, networks and volumes",
    )
    parser.add_argument(
        "-f",
        "--filter",
        dest="filters",
        action="append",
        default=None,
        metavar="KEY=VALUE",
        help="Provide filter values (e.g. 'label=<key>=<value>'), repeatable or comma-separated",
    )
    parser.add_argument(
        "--interval",
        default=None,
        metavar="DURATION",
        help="Cleaning job interval (e.g. 24h, 1h30m; default: 24h)",
    )
    parser.add_argument(
        "-a",
        "--all",
        dest="prune_all",
        action="store_true",
        default=None,
        help="Remove all unused images not just dangling ones",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="Optional log file path",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    return parser


def load_settings(args: argparse.Namespace) -> Settings:
    """
    合并配置：命令行参数优先，其次环境变量 / app.properties

    Raises:
        ValidationError: 配置校验失败
        SettingsError: 配置来源（环境变量 / app.properties）无法解析
    """
    overrides = {
        "PRUNE_FILTERS": args.filters,
        "PRUNE_INTERVAL": args.interval,
        "PRUNE_ALL": args.prune_all,
        "LOG_LEVEL": args.log_level,
        "LOG_FILE": args.log_file,
    }
    return Settings(**{k: v for k, v in overrides.items() if v is not None})


def main(argv: Optional[List[str]] = None) -> int:
    """服务主入口"""
    args = build_parser().parse_args(argv)

    setup_logger("INFO")

    try:
        settings = load_settings(args)
    except (ValidationError, SettingsError) as e:
        logger.critical(f"Invalid configuration: {e}")
        sys.exit(1)

    settings.ensure_directories()
    setup_logger(settings.LOG_LEVEL, settings.LOG_FILE)

    logger.info("=" * 70)
    logger.info(f"🐳 Docker Janitor v{__version__}")
    logger.info("=" * 70)

    try:
        filters = FilterSet.from_args(settings.PRUNE_FILTERS)
    except FilterParseException as e:
        logger.critical(f"Failed to parse filter argument: {e}")
        sys.exit(1)

    try:
        docker_manager.init(timeout=settings.DOCKER_TIMEOUT)
        if not docker_manager.ping():
            raise EngineConnectionException("Docker engine not responding to ping")
    except EngineException as e:
        logger.critical(f"Failed to create Docker client: {e}")
        docker_manager.close()
        sys.exit(1)

    version = docker_manager.server_version()
    logger.info(f"✓ Docker engine connected{f' (v{version})' if version else ''}")

    logger.info("-" * 70)
    logger.info(f"Interval: {format_duration(settings.interval_seconds)}")
    logger.info(f"Cycle deadline: {format_duration(settings.cycle_timeout_seconds)}")
    logger.info(f"Filters: {filters}")
    logger.info(f"Prune all images: {settings.PRUNE_ALL}")
    logger.info("-" * 70)

    metrics = MetricsObserver()
    executor = create_default_executor(
        docker_manager.get_client(),
        observers=[LoggingObserver(), metrics],
    )
    scheduler = CycleScheduler(
        executor,
        filters,
        prune_all=settings.PRUNE_ALL,
        interval=settings.interval_seconds,
        cycle_timeout=settings.cycle_timeout_seconds,
    )
    daemon = SchedulerDaemon(scheduler)

    stop_event = threading.Event()
    SignalHandler() \
        .on_shutdown(daemon.stop) \
        .on_shutdown(stop_event.set) \
        .register()

    daemon.start()

    try:
        stop_event.wait()
    except KeyboardInterrupt:
        logger.info("⚠️  Keyboard interrupt received")
        daemon.stop()

    daemon.join(timeout=get_scheduler_config().DAEMON_THREAD_JOIN_TIMEOUT)
    docker_manager.close()

    logger.info(f"📊 Prune metrics: {metrics.get_metrics()}")
    logger.info("✅ Docker Janitor stopped")
    return 0


if __name__ == "__main__":
    sys.exit(main())
