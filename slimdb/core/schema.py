"""
SlimDb 表结构元数据

定义规范化列类型、列描述以及按连接缓存的表结构。
"""

import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional


class ColumnType(str, Enum):
    """规范化列类型"""
    INTEGER = 'integer'
    FLOAT = 'float'
    STRING = 'string'
    BOOL = 'bool'
    UNSPECIFIED = 'unspecified'


@dataclass
class ColumnInfo:
    """
    列描述

    Attributes:
        table: 表名
        name: 字段名
        type: 规范化类型
        native_type: 数据库原生类型字符串
        length: 声明长度（字符串类型，如 varchar(50) -> '50'）
        default: 默认值
        primary: 是否主键
        nullable: 是否可为空
        identity: 是否自增
        unsigned: 是否无符号（仅 MySQL）
        values: 枚举值列表（仅 enum 字段）
    """
    table: str
    name: str
    type: ColumnType = ColumnType.UNSPECIFIED
    native_type: str = ''
    length: Optional[str] = None
    default: Optional[str] = None
    primary: bool = False
    nullable: bool = True
    identity: bool = False
    unsigned: bool = False
    values: Optional[List[str]] = None


TableSchema = Dict[str, ColumnInfo]


class SchemaCache:
    """
    表结构缓存

    每个连接一份，首次请求某表时通过 loader 加载，之后一直复用，
    直到 invalidate() 或 force_reload。
    """

    def __init__(self) -> None:
        self._tables: Dict[str, TableSchema] = {}
        self._lock = threading.Lock()

    def get(
        self,
        table: str,
        loader: Callable[[str], TableSchema],
        force_reload: bool = False
    ) -> TableSchema:
        """
        获取表结构

        Args:
            table: 表名
            loader: 缓存未命中时调用的加载函数
            force_reload: 强制重新加载

        Returns:
            {字段名: ColumnInfo}
        """
        with self._lock:
            if table in self._tables and not force_reload:
                return self._tables[table]
        schema = loader(table)
        with self._lock:
            self._tables[table] = schema
        return schema

    def invalidate(self, table: Optional[str] = None) -> None:
        """清除某张表（或全部）的缓存"""
        with self._lock:
            if table is None:
                self._tables.clear()
            else:
                self._tables.pop(table, None)

    def __contains__(self, table: object) -> bool:
        return table in self._tables

    def __len__(self) -> int:
        return len(self._tables)
