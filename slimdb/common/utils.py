"""
SlimDb 通用工具函数
"""

import hashlib
import re
from typing import Any, Optional, Sequence

# 写操作语句（返回受影响行数而不是结果集）
MUTATING_SQL_RE = re.compile(r'^\s*(INSERT|UPDATE|DELETE|REPLACE)\s', re.IGNORECASE)

# 插入语句（会产生 last insert id）
INSERT_SQL_RE = re.compile(r'^\s*(INSERT|REPLACE)\s', re.IGNORECASE)


def is_mutating_sql(sql: str) -> bool:
    """判断 SQL 是否为写操作（INSERT/UPDATE/DELETE/REPLACE）"""
    return MUTATING_SQL_RE.match(sql) is not None


def is_insert_sql(sql: str) -> bool:
    """判断 SQL 是否为插入语句"""
    return INSERT_SQL_RE.match(sql) is not None


def sql_hash(sql: str) -> str:
    """计算 SQL 文本的 md5 摘要（预编译语句缓存的键）"""
    return hashlib.md5(sql.encode('utf-8')).hexdigest()


def _literal(value: Any) -> str:
    if value is None:
        return 'NULL'
    if isinstance(value, bool):
        return '1' if value else '0'
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, bytes):
        return "x'" + value.hex() + "'"
    return "'" + str(value).replace("'", "''") + "'"


def render_sql(sql: str, params: Optional[Sequence[Any]] = None) -> str:
    """
    将占位符 ? 替换为参数字面量

    仅用于日志和异常信息，结果永远不会被执行。
    参数不足时保留剩余的占位符。

    Args:
        sql: 含 ? 占位符的 SQL
        params: 位置参数

    Returns:
        代入参数后的 SQL 文本
    """
    if not params:
        return sql
    values = iter(params)

    def _replace(match: 're.Match[str]') -> str:
        try:
            return _literal(next(values))
        except StopIteration:
            return match.group(0)

    return re.sub(r'\?', _replace, sql)
