"""
具体清理策略实现

每个策略对应 Docker 引擎的一个 prune 接口
"""

from typing import Any, Dict, List

from core.enums import PruneTarget
from core.filters import FilterSet

from .base import BasePruneStrategy
from .metadata import strategy_metadata
from .types import PruneOutcome


def _count(report: dict, key: str) -> int:
    # 引擎在没有删除任何对象时返回 null
    return len(report.get(key) or [])


@strategy_metadata(priority=1)
class ContainerPruneStrategy(BasePruneStrategy):
    """删除已停止的容器"""

    target = PruneTarget.CONTAINERS

    @property
    def description(self) -> str:
        return "删除所有已停止的容器"

    def _do_prune(self, client: Any, filters: Dict[str, List[str]]) -> PruneOutcome:
        report = client.containers.prune(filters=filters) or {}
        deleted = _count(report, "ContainersDeleted")
        space = report.get("SpaceReclaimed") or 0
        return PruneOutcome(
            operation=self.name,
            items_deleted=deleted,
            space_reclaimed=space,
            summary=f"Deleted Containers: {deleted}, Reclaimed Space: {space}",
        )


@strategy_metadata(priority=2)
class ImagePruneStrategy(BasePruneStrategy):
    """删除悬空镜像（prune_all 时删除全部未使用镜像）"""

    target = PruneTarget.IMAGES

    @property
    def description(self) -> str:
        return "删除悬空镜像（--all 时删除全部未使用镜像）"

    def build_filters(self, filters: FilterSet, prune_all: bool) -> FilterSet:
        return filters.with_criterion("dangling", "false" if prune_all else "true")

    def _do_prune(self, client: Any, filters: Dict[str, List[str]]) -> PruneOutcome:
        report = client.images.prune(filters=filters) or {}
        deleted = _count(report, "ImagesDeleted")
        space = report.get("SpaceReclaimed") or 0
        return PruneOutcome(
            operation=self.name,
            items_deleted=deleted,
            space_reclaimed=space,
            summary=f"Deleted Images: {deleted}, Reclaimed Space: {space}",
        )


@strategy_metadata(priority=3)
class NetworkPruneStrategy(BasePruneStrategy):
    """删除未被容器使用的网络"""

    target = PruneTarget.NETWORKS

    @property
    def description(self) -> str:
        return "删除未被任何容器使用的网络"

    def _do_prune(self, client: Any, filters: Dict[str, List[str]]) -> PruneOutcome:
        report = client.networks.prune(filters=filters) or {}
        deleted = _count(report, "NetworksDeleted")
        # 网络清理不回收磁盘空间
        return PruneOutcome(
            operation=self.name,
            items_deleted=deleted,
            space_reclaimed=0,
            summary=f"Deleted Networks: {deleted}",
        )


@strategy_metadata(priority=4)
class VolumePruneStrategy(BasePruneStrategy):
    """删除未挂载的卷"""

    target = PruneTarget.VOLUMES

    @property
    def description(self) -> str:
        return "删除未被任何容器挂载的卷"

    def _do_prune(self, client: Any, filters: Dict[str, List[str]]) -> PruneOutcome:
        report = client.volumes.prune(filters=filters) or {}
        deleted = _count(report, "VolumesDeleted")
        space = report.get("SpaceReclaimed") or 0
        return PruneOutcome(
            operation=self.name,
            items_deleted=deleted,
            space_reclaimed=space,
            summary=f"Deleted Volumes: {deleted}, Reclaimed Space: {space}",
        )
