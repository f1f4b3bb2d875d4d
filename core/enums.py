"""
Docker Janitor 的枚举类型定义
"""

from enum import Enum


class SchedulerState(str, Enum):
    """调度器状态枚举"""

    IDLE = "IDLE"  # 空闲：无待处理或运行中的清理
    PENDING = "PENDING"  # 等待：已有一个清理请求待处理
    RUNNING = "RUNNING"  # 运行：清理周期正在执行


class CycleOutcome(str, Enum):
    """清理周期结果枚举"""

    PENDING = "pending"  # 尚未结束
    SUCCEEDED = "succeeded"  # 全部清理成功
    FAILED = "failed"  # 某个清理操作失败
    TIMED_OUT = "timed_out"  # 超过截止时间被放弃
    CANCELLED = "cancelled"  # 调度器停止时被取消


class PruneTarget(str, Enum):
    """清理对象枚举（按执行顺序）"""

    CONTAINERS = "containers"
    IMAGES = "images"
    NETWORKS = "networks"
    VOLUMES = "volumes"
