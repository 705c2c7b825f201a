"""
mf 核心模块：配置、枚举、异常、数据模型和工具函数
"""
