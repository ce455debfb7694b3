"""
SlimDb 结果集

ResultSet 包装一次执行的语句，提供只进游标、行数统计以及行的物化方式：
字典（默认）、普通对象、或绑定表结构的 Record。
"""

from enum import Enum
from types import SimpleNamespace
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence, Union, TYPE_CHECKING

from ..common.exceptions import ArgumentError
from ..common.utils import is_mutating_sql

if TYPE_CHECKING:
    from ..core.connection import Connection, Statement
    from ..core.table import Table


class ResultMode(Enum):
    """行物化方式"""
    DICT = 'dict'
    OBJECT = 'object'
    RECORD = 'record'


class ResultSet:
    """
    只进结果集

    支持迭代和 len()：

        for row in users.select().run():
            print(row['name'])

        rs = users.select().run().as_record()
        rs.apply(lambda record, index: record.set('name', f'User {index}').save())
    """

    def __init__(self, connection: 'Connection', statement: 'Statement', params: Optional[Sequence[Any]] = None):
        """
        Args:
            connection: 执行语句的连接
            statement: 已执行的语句
            params: 语句参数（用于行数统计子查询）
        """
        self.connection = connection
        self.statement = statement
        self.params: List[Any] = list(params) if params else []
        self._table: Optional['Table'] = None
        self._mode = ResultMode.DICT
        self._object_class: Optional[Callable[[Dict[str, Any]], Any]] = None
        self._row_count: Optional[int] = None
        self._current: Any = None
        self._position = 0

    @property
    def sql(self) -> str:
        return self.statement.sql

    @property
    def table(self) -> Optional['Table']:
        return self._table

    @property
    def mode(self) -> ResultMode:
        return self._mode

    @property
    def position(self) -> int:
        """已读取的行数"""
        return self._position

    @property
    def current(self) -> Any:
        """最近一次读取的行（尚未读取或已读完时为 None）"""
        return self._current

    # -- 物化方式 --

    def set_table(self, table: Union['Table', str]) -> 'ResultSet':
        """绑定表（as_record() 需要）"""
        if isinstance(table, str):
            table = self.connection.table(table)
        self._table = table
        return self

    def as_dict(self) -> 'ResultSet':
        self._mode = ResultMode.DICT
        return self

    def as_object(self, cls: Optional[Callable[[Dict[str, Any]], Any]] = None) -> 'ResultSet':
        """
        以对象返回行

        Args:
            cls: 以行字典为唯一参数的构造函数；为空时使用 SimpleNamespace
        """
        self._mode = ResultMode.OBJECT
        self._object_class = cls
        return self

    def as_record(self) -> 'ResultSet':
        """以 Record 返回行（标记为已从数据库加载）"""
        if self._table is None:
            raise ArgumentError(
                "ResultSet has no table, call set_table() before as_record()",
                connection=self.connection.name,
                sql=self.sql
            )
        self._mode = ResultMode.RECORD
        return self

    def _materialize(self, row: Dict[str, Any]) -> Any:
        if self._mode == ResultMode.OBJECT:
            if self._object_class is None:
                return SimpleNamespace(**row)
            return self._object_class(row)
        if self._mode == ResultMode.RECORD:
            from ..core.record import Record
            assert self._table is not None
            return Record(self._table, row, loaded=True)
        return row

    # -- 行数 --

    def row_count(self) -> int:
        """
        受影响/返回的行数（只计算一次）

        写操作使用驱动报告的受影响行数；查询语句交给方言统计。
        """
        if self._row_count is None:
            if is_mutating_sql(self.sql):
                self._row_count = self.statement.affected_rows()
            else:
                self._row_count = self.connection.dialect.row_count(
                    self.connection, self.sql, self.params, self.statement
                )
        return self._row_count

    def __len__(self) -> int:
        return max(self.row_count(), 0)

    # -- 游标 --

    def get_row(self) -> Any:
        """读取下一行，没有更多行时返回 None"""
        raw = self.statement.fetch_row()
        if raw is None:
            self._current = None
            return None
        self._position += 1
        self._current = self._materialize(raw)
        return self._current

    next = get_row

    def rewind(self) -> 'ResultSet':
        """
        回到起点

        游标只进，只有在尚未读取任何行时才允许。
        """
        if self._position:
            raise ArgumentError("ResultSet is forward-only and cannot be rewound", sql=self.sql)
        return self

    def __iter__(self) -> Iterator[Any]:
        return self

    def __next__(self) -> Any:
        row = self.get_row()
        if row is None:
            raise StopIteration
        return row

    def get_all(self) -> List[Any]:
        """读取剩余全部行"""
        if self._mode == ResultMode.DICT:
            rows = self.statement.fetch_all()
            self._position += len(rows)
            self._current = None
            return rows
        return list(self)

    def get_val(self, column: Union[int, str] = 0) -> Any:
        """
        读取下一行的单个值

        Args:
            column: 列序号或列名

        Returns:
            列值；没有行时返回 None
        """
        raw = self.statement.fetch_row()
        if raw is None:
            return None
        self._position += 1
        if isinstance(column, int):
            values = list(raw.values())
            return values[column] if column < len(values) else None
        return raw.get(column)

    def apply(self, fn: Callable[[Any, int], Any]) -> 'ResultSet':
        """对剩余每一行调用 fn(row, index)"""
        for index, row in enumerate(self):
            fn(row, index)
        return self

    def last_insert_id(self) -> Any:
        return self.connection.last_insert_id()

    def __repr__(self) -> str:
        return f"<ResultSet {self.sql!r} position={self._position}>"
