"""
SlimDb 方言模块

提供引擎方言接口及 SQLite / MySQL 实现
"""

from .base import DatabaseDialect
from .dialect_sqlite import SqliteDialect
from .dialect_mysql import MysqlDialect, parse_enum_values
from .registry import DIALECTS, get_dialect, get_available_engines

__all__ = [
    'DatabaseDialect',
    'SqliteDialect',
    'MysqlDialect',
    'parse_enum_values',
    'DIALECTS',
    'get_dialect',
    'get_available_engines',
]
