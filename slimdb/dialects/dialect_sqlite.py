"""
SlimDb SQLite 方言

基于标准库 sqlite3，无外部依赖
"""

import os
import re
from typing import Any, List, Optional, Sequence, TYPE_CHECKING

from .base import DatabaseDialect
from ..core.schema import ColumnInfo, ColumnType, TableSchema

if TYPE_CHECKING:
    from ..core.connection import Connection, Statement

_FLOAT_RE = re.compile(r'FLOA|DOUB|REAL|NUME|DECI', re.IGNORECASE)
_STRING_RE = re.compile(r'CLOB|CHAR|TEXT', re.IGNORECASE)


class SqliteDialect(DatabaseDialect):
    """SQLite dialect (stdlib sqlite3)"""

    ENGINE_NAME = 'sqlite'
    QUOTE_TEMPLATE = '[{}]'
    REQUIRED_DEPENDENCIES = ['sqlite3']

    def db_name(self, conn: 'Connection') -> str:
        """主数据库的文件名（内存数据库返回空字符串）"""
        for row in conn.query("PRAGMA database_list").get_all():
            if row.get('name') == 'main':
                return os.path.basename(row.get('file') or '')
        return ''

    def list_tables(self, conn: 'Connection') -> List[str]:
        rows = conn.query(
            "SELECT name FROM sqlite_master WHERE type='table' "
            "AND name NOT LIKE 'sqlite_%' ORDER BY name"
        ).get_all()
        return [str(row['name']) for row in rows]

    def classify_type(self, native_type: str) -> ColumnType:
        upper = native_type.upper()
        if 'INT' in upper:
            return ColumnType.INTEGER
        if 'BOOL' in upper:
            return ColumnType.BOOL
        if _FLOAT_RE.search(native_type):
            return ColumnType.FLOAT
        if _STRING_RE.search(native_type):
            return ColumnType.STRING
        return ColumnType.UNSPECIFIED

    def describe_table(self, conn: 'Connection', table: str) -> TableSchema:
        """
        通过 PRAGMA table_info 查询表结构

        INTEGER PRIMARY KEY 列是 rowid 的别名，视为自增列。
        """
        rows = conn.query(f"PRAGMA table_info({conn.quote(table)})").get_all()
        pk_count = sum(1 for row in rows if int(row['pk'] or 0))
        schema: TableSchema = {}
        for row in rows:
            native_type = row['type'] or ''
            col_type = self.classify_type(native_type)
            primary = bool(int(row['pk'] or 0))
            column = ColumnInfo(
                table=table,
                name=row['name'],
                type=col_type,
                native_type=native_type,
                default=row['dflt_value'],
                primary=primary,
                nullable=not int(row['notnull'] or 0),
                identity=primary and pk_count == 1 and native_type.upper() == 'INTEGER',
            )
            if col_type == ColumnType.STRING:
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
        """sqlite3 不报告 SELECT 的行数，包装成子查询统计"""
        sql = sql.strip().rstrip(';')
        count = conn.query(f"SELECT count(*) FROM ({sql}) AS tmp", params).get_val()
        return int(count or 0)

    def truncate(self, conn: 'Connection', table: str) -> None:
        """删除全部记录并重置 AUTOINCREMENT 序列"""
        conn.query(f"DELETE FROM {conn.quote(table)}")
        has_sequence = conn.query(
            "SELECT count(*) FROM sqlite_master WHERE type='table' AND name='sqlite_sequence'"
        ).get_val()
        if has_sequence:
            conn.query("DELETE FROM sqlite_sequence WHERE name = ?", [table])
