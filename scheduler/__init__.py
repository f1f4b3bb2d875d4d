"""
Scheduler Service - 清理调度服务

职责：
- 按固定间隔触发清理周期（启动时立即执行一次）
- 保证同一时刻最多一个清理周期在执行
- 按顺序调用 Docker 引擎的 prune 接口并汇总回收空间

架构：
- scheduler.py: 清理周期调度器（状态机）
- daemon.py: 协调线程与定时触发线程
- context.py: 带截止时间的可取消上下文
- prune_strategies/: 清理策略与执行器（自动注册）
"""

__version__ = "1.0.0"
