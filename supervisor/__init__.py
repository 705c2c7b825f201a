"""
Supervisor - 进程监督服务

职责：
- 启动或附加到被监督进程
- 周期性运行检查命令
- 根据检查结果暂停、恢复或终止进程树

架构：
- core/: 守护线程与监督状态机
- monitoring/: 健康检查
- process/: 进程快照、后代发现、信号发送、进程树控制
- utils/: 信号处理
"""

__version__ = "1.0.0"
