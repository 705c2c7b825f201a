"""
mf 安装配置
"""
from setuptools import setup, find_packages

setup(
    name="mf-supervisor",
    version="1.0.0",
    description="根据检查命令冻结、恢复或终止进程树的进程监督器",
    author="mf Team",
    author_email="",
    packages=find_packages(include=["core", "core.*", "supervisor", "supervisor.*"]),
    python_requires=">=3.10",
    install_requires=[
        "loguru>=0.7",
        "psutil>=5.9",
        "pydantic>=2.0",
        "pydantic-settings>=2.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "mf=supervisor.main:main",
        ],
    },
)
