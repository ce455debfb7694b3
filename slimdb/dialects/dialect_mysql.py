"""
SlimDb MySQL 方言

需要 PyMySQL：pip install slimdb[mysql]
"""

import re
from typing import Any, List, Optional, Sequence, TYPE_CHECKING

from .base import DatabaseDialect
from ..core.schema import ColumnInfo, ColumnType, TableSchema

if TYPE_CHECKING:
    from ..core.connection import Connection, Statement

_ENUM_RE = re.compile(r'^enum\((.*)\)$', re.IGNORECASE)
_ENUM_VALUE_RE = re.compile(r"'((?:[^']|'')*)'")
_FLOAT_RE = re.compile(r'decimal|float|double', re.IGNORECASE)
_STRING_RE = re.compile(r'var|char|text', re.IGNORECASE)
# 引号内的字面量（原样保留，只转义 %）、? 占位符、裸 %
_PLACEHOLDER_RE = re.compile(r"'(?:[^'\\]|\\.|'')*'|\"(?:[^\"\\]|\\.|\"\")*\"|\?|%")


def parse_enum_values(native_type: str) -> List[str]:
    """
    解析 enum 声明的取值列表

    Example:
        parse_enum_values("enum('a','b','c')")  ->  ['a', 'b', 'c']
    """
    match = _ENUM_RE.match(native_type.strip())
    if not match:
        return []
    return [value.replace("''", "'") for value in _ENUM_VALUE_RE.findall(match.group(1))]


def _translate_token(match: 're.Match[str]') -> str:
    token = match.group(0)
    if token == '?':
        return '%s'
    return token.replace('%', '%%')


class MysqlDialect(DatabaseDialect):
    """MySQL dialect (requires PyMySQL)"""

    ENGINE_NAME = 'mysql'
    QUOTE_TEMPLATE = '`{}`'
    REQUIRED_DEPENDENCIES = ['pymysql']

    def translate_placeholders(self, sql: str) -> str:
        """
        PyMySQL 使用 format 风格：% 转义为 %%，? 转换为 %s

        引号内的 ? 是字面量，不作为占位符。
        """
        return _PLACEHOLDER_RE.sub(_translate_token, sql)

    def db_name(self, conn: 'Connection') -> str:
        return conn.query("SELECT DATABASE()").get_val() or ''

    def list_tables(self, conn: 'Connection') -> List[str]:
        tables = []
        for row in conn.query("SHOW TABLES").get_all():
            values = list(row.values())
            if values:
                tables.append(str(values[0]))
        return tables

    def classify_type(self, native_type: str) -> ColumnType:
        lower = native_type.lower()
        if 'int' in lower:
            return ColumnType.INTEGER
        if 'enum' in lower:
            return ColumnType.STRING
        if _FLOAT_RE.search(native_type):
            return ColumnType.FLOAT
        if _STRING_RE.search(native_type):
            return ColumnType.STRING
        return ColumnType.UNSPECIFIED

    def describe_table(self, conn: 'Connection', table: str) -> TableSchema:
        """通过 DESCRIBE 查询表结构"""
        rows = conn.query(f"DESCRIBE {conn.quote(table)}").get_all()
        schema: TableSchema = {}
        for row in rows:
            native_type = row['Type'] or ''
            if isinstance(native_type, bytes):
                native_type = native_type.decode('utf-8')
            col_type = self.classify_type(native_type)
            column = ColumnInfo(
                table=table,
                name=row['Field'],
                type=col_type,
                native_type=native_type,
                default=row['Default'],
                primary=row['Key'] == 'PRI',
                nullable=row['Null'] == 'YES',
                identity='auto_increment' in (row['Extra'] or '').lower(),
                unsigned='unsigned' in native_type.lower(),
            )
            if 'enum' in native_type.lower():
                column.values = parse_enum_values(native_type)
            elif col_type == ColumnType.STRING:
                column.length = self.parse_length(native_type)
            schema[column.name] = column
        return schema

    def row_count(
        self,
        conn: 'Connection',
        sql: str,
        params: Optional[Sequence[Any]],
        statement: 'Statement'
    ) -> int:
        """PyMySQL 的缓冲游标直接报告行数"""
        return int(statement.affected_rows())

    def truncate(self, conn: 'Connection', table: str) -> None:
        """TRUNCATE 会同时重置 AUTO_INCREMENT"""
        conn.query(f"TRUNCATE TABLE {conn.quote(table)}")
