"""
SlimDb 公共模块

包含异常定义、配置选项和工具函数
"""
