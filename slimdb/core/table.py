"""
SlimDb 表

Table 是单表操作的入口：为每条语句创建新的构建器，
并提供表结构、主键、计数、按主键查询等便捷方法。
"""

from typing import Any, Dict, List, Mapping, Optional, TypeVar, TYPE_CHECKING

from ..common.exceptions import PrimaryKeyNotFoundError
from ..query.builder import (
    CountQuery,
    DeleteQuery,
    Fields,
    FilterableQuery,
    InsertQuery,
    SelectQuery,
    UpdateQuery,
)
from .schema import ColumnInfo, TableSchema

if TYPE_CHECKING:
    from .connection import Connection
    from .record import Record

_F = TypeVar('_F', bound=FilterableQuery)


class Table:
    """单表操作"""

    def __init__(self, connection: 'Connection', name: str, primary_key: Optional[str] = None):
        """
        Args:
            connection: 所属连接
            name: 表名
            primary_key: 主键名（已知时跳过表结构查询），默认取连接选项中的配置
        """
        self.connection = connection
        self.name = name
        self._pk_name = primary_key or connection.options.primary_keys.get(name)

    # -- 语句构建器 --

    def select(self, columns: Optional[Fields] = '*') -> SelectQuery:
        return SelectQuery(self, columns)

    def insert(self, data: Mapping[str, Any]) -> InsertQuery:
        return InsertQuery(self, data)

    def update(self, data: Mapping[str, Any]) -> UpdateQuery:
        return UpdateQuery(self, data)

    def delete(self) -> DeleteQuery:
        return DeleteQuery(self)

    def count_query(self) -> CountQuery:
        """count(*) 构建器，用于原始 SQL 条件：count_query().where('id > ?', 5).run()"""
        return CountQuery(self)

    # -- 便捷查询 --

    def count(self, where: Optional[Mapping[str, Any]] = None) -> int:
        """
        SELECT count(*)

        Args:
            where: {字段: 值} 条件

        Returns:
            记录数
        """
        query = CountQuery(self)
        if where:
            query.where_equals(where)
        return query.run()

    def count_by_id(self, pk: Any) -> int:
        """按主键计数（用于判断记录是否存在）"""
        return self._pk_clause(CountQuery(self), pk).run()

    def first(self, where: Optional[Mapping[str, Any]] = None) -> Optional[Dict[str, Any]]:
        """返回第一条匹配记录（字典），没有时返回 None"""
        query = self.select()
        if where:
            query.where_equals(where)
        return query.first()

    def first_by_id(self, pk: Any) -> Optional['Record']:
        """按主键查询，返回已加载的 Record，没有时返回 None"""
        return (
            self._pk_clause(self.select(), pk)
            .limit(1)
            .run()
            .as_record()
            .get_row()
        )

    def _pk_clause(self, query: _F, pk: Any) -> _F:
        """按主键精确匹配（不使用 LIKE，主键值可以包含 %）"""
        return query.where_raw(f"{self.connection.quote(self.pk_name())} = ?", [pk])

    # -- 表结构 --

    def schema(self, force_reload: bool = False) -> TableSchema:
        """{字段名: ColumnInfo}（按连接缓存）"""
        schema = self.connection.schema(self.name, force_reload)
        assert isinstance(schema, dict)
        return schema

    def column(self, name: str) -> Optional[ColumnInfo]:
        return self.schema().get(name)

    def cols(self) -> List[str]:
        """字段名列表"""
        return list(self.schema())

    def pk_name(self) -> str:
        """
        主键字段名（不支持复合主键，取第一个主键列）

        Raises:
            PrimaryKeyNotFoundError: 表中没有主键
        """
        if self._pk_name is not None:
            return self._pk_name
        for column in self.schema().values():
            if column.primary:
                self._pk_name = column.name
                return self._pk_name
        raise PrimaryKeyNotFoundError(self.name)

    def full_name(self) -> str:
        """带数据库名的表名，如 main.users"""
        return f"{self.connection.db_name()}.{self.name}"

    def truncate(self) -> None:
        """清空表并重置自增序列"""
        self.connection.truncate(self.name)

    def last_insert_id(self) -> Any:
        return self.connection.last_insert_id()

    # -- ORM --

    def record(self, data: Optional[Mapping[str, Any]] = None) -> 'Record':
        """创建新的（未保存的）Record，data 作为待保存的修改"""
        from .record import Record
        record = Record(self)
        if data:
            record.set(data)
        return record

    def load(self, pk: Any) -> 'Record':
        """按主键加载 Record"""
        return self.record().load(pk)

    def __repr__(self) -> str:
        return f"Table(name={self.name!r}, connection={self.connection.name!r})"
