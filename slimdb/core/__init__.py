"""
SlimDb 核心模块

包含连接注册表、连接、表结构缓存、查询日志、表和 Record
"""

from .schema import ColumnType, ColumnInfo, SchemaCache
from .querylog import QueryLog, QueryLogEntry
from .connection import Connection, Statement
from .connectors import sqlite_factory, mysql_factory
from .registry import DatabaseRegistry
from .table import Table
from .record import Record

__all__ = [
    # Schema
    'ColumnType',
    'ColumnInfo',
    'SchemaCache',
    # Query log
    'QueryLog',
    'QueryLogEntry',
    # Connection & registry
    'Connection',
    'Statement',
    'DatabaseRegistry',
    'sqlite_factory',
    'mysql_factory',
    # Table & ORM
    'Table',
    'Record',
]
