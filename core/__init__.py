"""
Core - 配置、日志、异常与 Docker 连接管理
"""
