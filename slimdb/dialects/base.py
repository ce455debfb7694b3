"""
SlimDb 数据库方言抽象基类

每种引擎（MySQL、SQLite ...）实现一个 DatabaseDialect 子类，
负责该引擎特有的 SQL 片段、表结构查询和行数统计。
新增引擎只需实现该接口并登记到 dialects.registry。
"""

import importlib.util
import re
from abc import ABC, abstractmethod
from typing import Any, List, Optional, Sequence, Union, TYPE_CHECKING

from ..common.exceptions import ArgumentError
from ..core.schema import ColumnType, TableSchema
from ..query.quoting import quote, quote_columns

if TYPE_CHECKING:
    from ..core.connection import Connection, Statement

# 括号内的长度声明，如 varchar(50)
_LENGTH_RE = re.compile(r'\((.+)\)')


class DatabaseDialect(ABC):
    """数据库方言接口"""

    ENGINE_NAME: str = ''
    QUOTE_TEMPLATE: str = '"{}"'
    REQUIRED_DEPENDENCIES: List[str] = []

    @classmethod
    def is_available(cls) -> bool:
        """检查引擎所需的驱动库是否已安装"""
        for dep in cls.REQUIRED_DEPENDENCIES:
            if importlib.util.find_spec(dep) is None:
                return False
        return True

    # -- 标识符引用 --

    def quote(self, expr: str) -> str:
        """按引擎模板引用标识符"""
        return quote(self.QUOTE_TEMPLATE, expr)

    def quote_columns(self, columns: Union[str, Sequence[str]]) -> str:
        """按引擎模板引用列列表"""
        return quote_columns(self.QUOTE_TEMPLATE, columns)

    # -- SQL 片段 --

    def limit_clause(self, offset: Any = 0, limit: Any = 0) -> str:
        """
        生成 LIMIT 子句

        Args:
            offset: 跳过的记录数
            limit: 返回的记录数

        Returns:
            以空格开头的 LIMIT 片段

        Raises:
            ArgumentError: offset/limit 组合无效
        """
        try:
            offset = int(offset or 0)
            limit = int(limit or 0)
        except (TypeError, ValueError):
            raise ArgumentError(
                f"Invalid parameters in query (offset={offset!r} - limit={limit!r} - driver {self.ENGINE_NAME})"
            )
        if offset == 0 and limit == 0:
            raise ArgumentError(
                f"Invalid parameters in query (offset={offset} - limit={limit} - driver {self.ENGINE_NAME})"
            )
        if offset < 0:
            raise ArgumentError(
                f"Invalid <offset> parameter in query (offset={offset} - driver {self.ENGINE_NAME})"
            )
        if limit < 0:
            raise ArgumentError(
                f"Invalid <limit> parameter in query (limit={limit} - driver {self.ENGINE_NAME})"
            )
        if limit == 0:
            # LIMIT offset, count 语法无法表达只有 offset 的情况
            raise ArgumentError(
                f"Missing <limit> parameter in query (offset={offset} - driver {self.ENGINE_NAME})"
            )
        if offset > 0:
            return f" LIMIT {offset}, {limit}"
        return f" LIMIT {limit}"

    def translate_placeholders(self, sql: str) -> str:
        """将 ? 占位符转换为驱动的 paramstyle（默认不转换）"""
        return sql

    # -- 需要各引擎实现的操作 --

    @abstractmethod
    def db_name(self, conn: 'Connection') -> str:
        """当前数据库名（或文件名）"""
        pass

    @abstractmethod
    def list_tables(self, conn: 'Connection') -> List[str]:
        """列出当前数据库中的全部表"""
        pass

    @abstractmethod
    def describe_table(self, conn: 'Connection', table: str) -> TableSchema:
        """查询表结构并转换为 {字段名: ColumnInfo}"""
        pass

    @abstractmethod
    def row_count(
        self,
        conn: 'Connection',
        sql: str,
        params: Optional[Sequence[Any]],
        statement: 'Statement'
    ) -> int:
        """查询语句返回的行数"""
        pass

    @abstractmethod
    def truncate(self, conn: 'Connection', table: str) -> None:
        """清空表并重置自增序列"""
        pass

    # -- 工具方法 --

    @staticmethod
    def parse_length(native_type: str) -> Optional[str]:
        """提取类型声明中括号内的长度，如 'varchar(50)' -> '50'"""
        match = _LENGTH_RE.search(native_type)
        return match.group(1) if match else None

    def classify_type(self, native_type: str) -> ColumnType:
        """将原生类型归类为规范化类型（子类实现具体规则）"""
        return ColumnType.UNSPECIFIED

    def __repr__(self) -> str:
        return f"{type(self).__name__}(engine={self.ENGINE_NAME!r})"
