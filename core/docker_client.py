"""
Docker 引擎连接管理器
"""

from typing import Optional

import docker
from docker.errors import DockerException
from loguru import logger

from .config import get_settings
from .utils.singleton import singleton
from .exceptions import EngineConnectionException, EngineNotInitializedException


@singleton
class DockerManager:
    """
    单例 Docker 客户端管理器

    客户端只读共享：调度器与清理周期线程都通过它发起相互独立的 API 调用
    """

    def __init__(self):
        self._client: Optional[docker.DockerClient] = None

    def init(self, timeout: Optional[int] = None) -> None:
        """
        根据环境变量（DOCKER_HOST、DOCKER_TLS_VERIFY、DOCKER_CERT_PATH）创建客户端

        Args:
            timeout: API 请求超时（秒），默认从配置读取

        Raises:
            EngineConnectionException: 无法创建客户端
        """
        if self._client is not None:
            logger.warning("DockerManager already initialized")
            return

        if timeout is None:
            timeout = get_settings().DOCKER_TIMEOUT

        try:
            self._client = docker.from_env(timeout=timeout)
        except DockerException as e:
            raise EngineConnectionException(str(e)) from e

        logger.info(f"Docker client created (timeout: {timeout}s)")

    def close(self) -> None:
        """关闭 Docker 客户端"""
        if self._client is not None:
            self._client.close()
            self._client = None
            logger.info("Docker client closed")

    def get_client(self) -> docker.DockerClient:
        """
        获取 Docker 客户端

        返回:
            DockerClient 实例
        """
        if self._client is None:
            raise EngineNotInitializedException()
        return self._client

    def ping(self) -> bool:
        """
        检查 Docker 引擎是否可用

        返回:
            如果引擎响应 ping 则为 True
        """
        try:
            return bool(self._client.ping()) if self._client else False
        except Exception as e:
            logger.error(f"Docker ping failed: {e}")
            return False

    def server_version(self) -> Optional[str]:
        """获取 Docker 引擎版本（仅用于启动日志）"""
        if self._client is None:
            return None
        try:
            return self._client.version().get("Version")
        except DockerException as e:
            logger.debug(f"Failed to query Docker version: {e}")
            return None

    def is_initialized(self) -> bool:
        """检查是否已初始化"""
        return self._client is not None


# 全局实例
docker_manager = DockerManager()
