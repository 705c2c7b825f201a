"""
Monitoring Module - 健康检查模块
"""

from .health_check import HealthChecker

__all__ = [
    "HealthChecker",
]
