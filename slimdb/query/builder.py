"""
SlimDb 查询构建器

每条语句一个构建器对象：创建 -> 链式配置 -> run() 执行 -> 丢弃。
编译结果统一使用 ? 占位符，由方言在执行时转换为驱动的 paramstyle。

    users = db.table('users')

    users.select('id, name').where_equals({'name': 'A%'}).order_by({'id': 'DESC'}).limit(10).run()
    users.insert({'name': 'Ann', 'email': 'a@x.com'}).run()
    users.update({'name': 'Bob'}).where_raw('id = ?', [1]).run()
    users.delete().where('id > ? AND id < ?', 1, 10).run()
    users.count({'name': 'Ann'})
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple, TypeVar, Union, TYPE_CHECKING

from ..common.exceptions import DataFormatError
from ..common.utils import render_sql

if TYPE_CHECKING:
    from ..core.connection import Connection
    from ..core.table import Table
    from .result import ResultSet

# 列/排序字段：逗号分隔字符串、列名序列，或 {列名: 方向/别名后缀}
Fields = Union[str, Sequence[str], Mapping]

_Q = TypeVar('_Q', bound='Query')
_F = TypeVar('_F', bound='FilterableQuery')
_S = TypeVar('_S', bound='SelectQuery')


@dataclass
class Clause:
    """编译后的条件：SQL 文本 + 位置参数"""
    sql: str
    params: List[Any] = field(default_factory=list)


@dataclass
class JoinClause:
    """JOIN 子句"""
    kind: str
    table: str
    condition: str
    params: List[Any] = field(default_factory=list)


def parse_fields(connection: 'Connection', fields: Optional[Fields]) -> str:
    """
    编译列列表 / ORDER BY 字段列表

    Example:
        'id, name'              ->  [id], [name]
        ['id', 'name']          ->  [id], [name]
        {'id': 'DESC'}          ->  [id] DESC
    """
    if not fields:
        return ''
    if isinstance(fields, str):
        if fields.strip() == '*':
            return '*'
        return connection.quote_columns(fields)
    if isinstance(fields, Mapping):
        parts = []
        for key, value in fields.items():
            suffix = f" {value}" if value else ''
            parts.append(f"{connection.quote(key)}{suffix}")
        return ', '.join(parts)
    return ', '.join(connection.quote(item) for item in fields)


def equals_clause(connection: 'Connection', conditions: Mapping) -> Clause:
    """
    编译 {字段: 值} 条件

    字符串值包含 % 时使用 LIKE，否则使用 =，多个条件以 AND 连接。
    """
    parts = []
    params = []
    for name, value in conditions.items():
        if not isinstance(name, str):
            continue
        operator = 'LIKE' if isinstance(value, str) and '%' in value else '='
        parts.append(f"{connection.quote(name)} {operator} ?")
        params.append(value)
    return Clause(' AND '.join(parts), params)


class Query:
    """语句构建器基类"""

    KIND = ''

    def __init__(self, table: 'Table'):
        self.table = table
        self.connection = table.connection
        self._cache_statement = False

    def cache_statement(self: _Q, flag: bool = True) -> _Q:
        """缓存预编译语句（批量执行相同 SQL 时使用）"""
        self._cache_statement = flag
        return self

    def compile(self) -> Tuple[str, List[Any]]:
        """编译为 (SQL, 位置参数)"""
        raise NotImplementedError

    def run(self) -> 'ResultSet':
        """编译并执行"""
        sql, params = self.compile()
        return self.connection.query(sql, params, self._cache_statement)

    def _quoted_table(self) -> str:
        return self.connection.quote(self.table.name)

    def __str__(self) -> str:
        sql, params = self.compile()
        return render_sql(sql, params)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} table={self.table.name!r}>"


class FilterableQuery(Query):
    """支持 JOIN 和 WHERE 的语句"""

    def __init__(self, table: 'Table'):
        super().__init__(table)
        # 以目标表名为键，同一张表后一次 join 覆盖前一次
        self._joins: Dict[str, JoinClause] = {}
        self._where: Optional[Clause] = None

    # -- JOIN --

    def _add_join(self: _F, kind: str, table: str, on: str, params: Sequence[Any]) -> _F:
        condition = f"{kind} {self.connection.quote(table)} ON {on}"
        self._joins[table] = JoinClause(kind, table, condition, list(params))
        return self

    def join(self: _F, table: str, on: str, params: Sequence[Any] = ()) -> _F:
        """INNER JOIN table ON <on>"""
        return self._add_join('INNER JOIN', table, on, params)

    def left_join(self: _F, table: str, on: str, params: Sequence[Any] = ()) -> _F:
        """LEFT JOIN table ON <on>"""
        return self._add_join('LEFT JOIN', table, on, params)

    def right_join(self: _F, table: str, on: str, params: Sequence[Any] = ()) -> _F:
        """RIGHT JOIN table ON <on>"""
        return self._add_join('RIGHT JOIN', table, on, params)

    # -- WHERE --

    def where_equals(self: _F, conditions: Mapping) -> _F:
        """
        设置 {字段: 值} 条件（替换已有条件）

        Example:
            where_equals({'id': 5})          ->  [id] = ?      (5)
            where_equals({'name': 'A%'})     ->  [name] LIKE ? ('A%')
        """
        clause = equals_clause(self.connection, conditions)
        if clause.sql:
            self._where = clause
        return self

    def where_raw(self: _F, sql: str, params: Sequence[Any] = ()) -> _F:
        """设置原始 SQL 条件及其参数（替换已有条件）"""
        if sql:
            self._where = Clause(sql, list(params))
        return self

    def where(self: _F, sql: str, *params: Any) -> _F:
        """where_raw 的可变参数形式：where('id >= ? AND id <= ?', 1, 10)"""
        return self.where_raw(sql, params)

    def _compile_joins(self, params: List[Any]) -> str:
        sql = ''
        for join in self._joins.values():
            sql += f" {join.condition}"
            params.extend(join.params)
        return sql

    def _compile_where(self, params: List[Any]) -> str:
        if self._where is None:
            return ''
        params.extend(self._where.params)
        return f" WHERE {self._where.sql}"


class SelectQuery(FilterableQuery):
    """SELECT 语句"""

    KIND = 'select'

    def __init__(self, table: 'Table', columns: Optional[Fields] = '*'):
        super().__init__(table)
        self._columns: Fields = columns or '*'
        self._distinct = False
        self._order: Optional[Fields] = None
        self._limit: Optional[int] = None
        self._offset = 0

    def columns(self: _S, columns: Fields) -> _S:
        self._columns = columns or '*'
        return self

    def distinct(self: _S, flag: bool = True) -> _S:
        self._distinct = flag
        return self

    def order_by(self: _S, fields: Fields) -> _S:
        """
        设置排序

        Example:
            order_by('name')
            order_by({'created': 'DESC', 'id': 'ASC'})
        """
        self._order = fields
        return self

    def limit(self: _S, limit: int, offset: int = 0) -> _S:
        self._limit = limit
        self._offset = offset
        return self

    def compile(self) -> Tuple[str, List[Any]]:
        params: List[Any] = []
        sql = 'SELECT DISTINCT' if self._distinct else 'SELECT'
        sql += f" {parse_fields(self.connection, self._columns)} FROM {self._quoted_table()}"
        sql += self._compile_joins(params)
        sql += self._compile_where(params)
        order = parse_fields(self.connection, self._order)
        if order:
            sql += f" ORDER BY {order}"
        if self._limit is not None:
            sql += self.connection.limit_clause(self._offset, self._limit)
        return sql, params

    def run(self) -> 'ResultSet':
        """执行查询，结果集以字典返回行，并绑定当前表（可切换为 as_record()）"""
        return super().run().set_table(self.table).as_dict()

    def first(self) -> Optional[Dict[str, Any]]:
        """只取第一行"""
        self._limit = 1
        self._offset = 0
        return self.run().get_row()


class CountQuery(SelectQuery):
    """SELECT count(*) 语句，run() 返回整数"""

    KIND = 'count'

    def __init__(self, table: 'Table'):
        super().__init__(table, 'count(*)')

    def run(self) -> int:  # type: ignore[override]
        sql, params = self.compile()
        value = self.connection.query(sql, params, self._cache_statement).get_val()
        return int(value or 0)


def _check_data(data: Any) -> Dict[str, Any]:
    if not isinstance(data, Mapping) or not data:
        raise DataFormatError("Invalid data argument. Must be a non-empty mapping!")
    return dict(data)


class InsertQuery(Query):
    """INSERT 语句"""

    KIND = 'insert'

    def __init__(self, table: 'Table', data: Mapping):
        super().__init__(table)
        self._data = _check_data(data)

    def compile(self) -> Tuple[str, List[Any]]:
        columns = self.connection.quote_columns(list(self._data))
        placeholders = ', '.join('?' for _ in self._data)
        sql = f"INSERT INTO {self._quoted_table()} ({columns}) VALUES ({placeholders})"
        return sql, list(self._data.values())


class UpdateQuery(FilterableQuery):
    """UPDATE 语句"""

    KIND = 'update'

    def __init__(self, table: 'Table', data: Mapping):
        super().__init__(table)
        self._data = _check_data(data)

    def compile(self) -> Tuple[str, List[Any]]:
        params: List[Any] = []
        sql = f"UPDATE {self._quoted_table()}"
        sql += self._compile_joins(params)
        assignments = ', '.join(f"{self.connection.quote(name)} = ?" for name in self._data)
        sql += f" SET {assignments}"
        params.extend(self._data.values())
        sql += self._compile_where(params)
        return sql, params


class DeleteQuery(FilterableQuery):
    """DELETE 语句"""

    KIND = 'delete'

    def compile(self) -> Tuple[str, List[Any]]:
        params: List[Any] = []
        sql = f"DELETE FROM {self._quoted_table()}"
        sql += self._compile_joins(params)
        sql += self._compile_where(params)
        return sql, params
