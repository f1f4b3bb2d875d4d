"""
线程安全的单例装饰器
"""

import threading
from typing import Any, Callable, Dict, TypeVar
from functools import wraps

T = TypeVar("T")


def singleton(cls: type[T]) -> Callable[..., T]:
    """
    线程安全的单例装饰器（双重检查锁）

    被装饰的类通过 ``reset_instance()`` 丢弃已创建的实例，供测试使用

    用法示例:
        @singleton
        class DockerManager:
            pass
    """
    instances: Dict[type, Any] = {}
    lock = threading.Lock()

    @wraps(cls)
    def get_instance(*args: Any, **kwargs: Any) -> T:
        if cls not in instances:
            with lock:
                if cls not in instances:
                    instances[cls] = cls(*args, **kwargs)
        return instances[cls]

    def reset_instance() -> None:
        with lock:
            instances.pop(cls, None)

    get_instance.reset_instance = reset_instance
    return get_instance
