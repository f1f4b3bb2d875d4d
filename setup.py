"""
Docker Janitor 安装配置
"""
from setuptools import setup, find_packages

setup(
    name="docker-janitor",
    version="1.0.0",
    description="定期清理 Docker 未使用资源的守护进程",
    author="Docker Janitor Team",
    author_email="",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    install_requires=[
        "docker>=7.0",
        "loguru>=0.7",
        "pydantic>=2.0",
        "pydantic-settings>=2.7",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "docker-janitor=scheduler.main:main",
        ],
    },
)
