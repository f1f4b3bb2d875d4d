"""
清理过滤条件

FilterSet 是不可变的 key/value 条件集合，同一周期内的所有清理操作共享同一实例；
需要追加条件时（如镜像清理的 dangling）总是返回新实例
"""

import csv
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple

from core.exceptions import FilterParseException


def split_filter_arg(argument: str) -> List[str]:
    """
    将一个 -f 参数按逗号拆分为多个过滤条件

    按 CSV 规则拆分，含逗号的值可用双引号包裹，如 `-f 'label="a,b"'`

    Args:
        argument: 命令行参数

    Returns:
        拆分后的参数列表；空参数返回空列表
    """
    if argument == "":
        return []
    return next(csv.reader([argument], skipinitialspace=True))


def parse_filter_flag(argument: str) -> Optional[Tuple[str, str]]:
    """
    解析单个 ``key=value`` 过滤参数

    规则与 docker CLI 一致：第一个 ``=`` 之前为 key（去空白并转小写），
    其余部分为 value（去空白）；空参数被忽略

    Args:
        argument: 命令行参数

    Returns:
        (key, value) 元组；空参数返回 None

    Raises:
        FilterParseException: 参数不包含 ``=``
    """
    if argument == "":
        return None

    if "=" not in argument:
        raise FilterParseException(argument)

    key, value = argument.split("=", 1)
    return key.strip().lower(), value.strip()


@dataclass(frozen=True)
class FilterSet:
    """不可变的过滤条件集合"""

    criteria: FrozenSet[Tuple[str, str]] = field(default_factory=frozenset)

    @classmethod
    def from_args(cls, arguments: Iterable[str]) -> "FilterSet":
        """
        从命令行参数构建过滤条件

        Args:
            arguments: ``key=value`` 形式的参数列表，单个参数可用逗号连接多个条件

        Raises:
            FilterParseException: 任一参数格式错误
        """
        pairs = set()
        for argument in arguments:
            for part in split_filter_arg(argument):
                pair = parse_filter_flag(part)
                if pair is not None:
                    pairs.add(pair)
        return cls(frozenset(pairs))

    def with_criterion(self, key: str, value: str) -> "FilterSet":
        """返回追加了一个条件的新 FilterSet，自身不变"""
        return FilterSet(self.criteria | {(key, value)})

    def get(self, key: str) -> List[str]:
        """获取某个 key 的全部取值（已排序）"""
        return sorted(v for k, v in self.criteria if k == key)

    def keys(self) -> List[str]:
        return sorted({k for k, _ in self.criteria})

    def to_docker(self) -> Dict[str, List[str]]:
        """
        转换为 docker SDK 的 filters 参数

        每次调用都返回新的 dict，调用方修改它不会影响本实例
        """
        result: Dict[str, List[str]] = {}
        for key, value in sorted(self.criteria):
            result.setdefault(key, []).append(value)
        return result

    def __len__(self) -> int:
        return len(self.criteria)

    def __contains__(self, item: object) -> bool:
        return item in self.criteria

    def __str__(self) -> str:
        if not self.criteria:
            return "{}"
        return "{" + ", ".join(f"{k}={v}" for k, v in sorted(self.criteria)) + "}"
