"""
SlimDb 连接

Connection 是某个已注册连接的句柄：懒连接、执行语句、缓存预编译语句、
记录查询日志，并持有该连接的表结构缓存。
"""

import logging
import threading
import time
from typing import Any, Callable, Dict, List, Optional, Sequence, Union, TYPE_CHECKING

from ..common.exceptions import ArgumentError, DatabaseError, SlimDbException
from ..common.options import ConnectionOptions
from ..common.utils import is_insert_sql, render_sql, sql_hash
from ..dialects.registry import get_dialect
from ..query.result import ResultSet
from .schema import SchemaCache, TableSchema
from .table import Table

if TYPE_CHECKING:
    from .querylog import QueryLog
    from .record import Record

logger = logging.getLogger(__name__)

# 零参数的连接工厂，返回 DB-API 2.0 连接
ConnectionFactory = Callable[[], Any]


class Statement:
    """
    已执行的语句

    包装 DB-API 游标；sql 为 ? 占位符形式（引擎无关），
    native_sql 为实际提交给驱动的文本。
    """

    def __init__(self, cursor: Any, sql: str, params: Sequence[Any], native_sql: Optional[str] = None):
        self.cursor = cursor
        self.sql = sql
        self.params: List[Any] = list(params)
        self.native_sql = native_sql if native_sql is not None else sql

    @property
    def columns(self) -> List[str]:
        """结果集列名（非查询语句为空列表）"""
        description = self.cursor.description
        if not description:
            return []
        return [item[0] for item in description]

    def fetch_row(self) -> Optional[Dict[str, Any]]:
        """读取下一行，返回 {列名: 值}，没有更多行时返回 None"""
        columns = self.columns
        if not columns:
            return None
        row = self.cursor.fetchone()
        if row is None:
            return None
        return dict(zip(columns, row))

    def fetch_all(self) -> List[Dict[str, Any]]:
        """读取剩余全部行"""
        columns = self.columns
        if not columns:
            return []
        return [dict(zip(columns, row)) for row in self.cursor.fetchall()]

    def affected_rows(self) -> int:
        """驱动报告的受影响行数（未知时为 -1）"""
        count = self.cursor.rowcount
        return count if count is not None else -1

    @property
    def last_row_id(self) -> Any:
        return getattr(self.cursor, 'lastrowid', None)

    def __repr__(self) -> str:
        return f"Statement({self.sql!r})"


class Connection:
    """已注册连接的句柄"""

    def __init__(
        self,
        name: str,
        engine: str,
        factory: ConnectionFactory,
        query_log: 'QueryLog',
        options: Optional[ConnectionOptions] = None
    ):
        """
        Args:
            name: 连接名
            engine: 引擎名称（'sqlite' / 'mysql'）
            factory: 连接工厂，首次执行语句时调用
            query_log: 查询日志（由注册表共享）
            options: 连接选项
        """
        self.name = name
        self.engine = engine.lower()
        self.dialect = get_dialect(engine)
        self.options = options or ConnectionOptions()
        self.query_log = query_log
        self.schema_cache = SchemaCache()
        self._factory = factory
        self._handle: Any = None
        self._statement_cache: Dict[str, Any] = {}
        self._last_insert_id: Any = None
        self._lock = threading.RLock()

    # -- 连接管理 --

    @property
    def is_connected(self) -> bool:
        return self._handle is not None

    @property
    def raw(self) -> Any:
        """底层 DB-API 连接（必要时建立连接）"""
        return self._ensure_connected()

    def _ensure_connected(self) -> Any:
        if self._handle is not None:
            return self._handle
        with self._lock:
            if self._handle is None:
                start = time.perf_counter()
                self._handle = self._factory()
                self._log(start, f"Establish database connection({self.name})")
                logger.info("Connected '%s' (%s)", self.name, self.engine)
        return self._handle

    def close(self) -> None:
        """关闭连接并清空语句缓存（再次执行语句时会重新连接）"""
        with self._lock:
            for cursor in self._statement_cache.values():
                try:
                    cursor.close()
                except Exception:
                    logger.debug("Failed to close cached statement on '%s'", self.name, exc_info=True)
            self._statement_cache.clear()
            if self._handle is not None:
                self._handle.close()
                self._handle = None

    def _log(self, start: float, message: str, params: Optional[Sequence[Any]] = None) -> None:
        if not self.options.log_queries:
            return
        self.query_log.append(self.name, time.perf_counter() - start, render_sql(message, params))

    # -- 语句执行 --

    def execute(
        self,
        sql: str,
        params: Optional[Sequence[Any]] = None,
        cache_statement: bool = False
    ) -> Statement:
        """
        执行 SQL 并返回语句对象

        无参数时直接执行；有参数时按位置绑定。
        cache_statement=True 时按 SQL 摘要复用游标，适合批量插入/更新。

        Args:
            sql: 使用 ? 占位符的 SQL
            params: 位置参数
            cache_statement: 是否缓存语句

        Returns:
            Statement 对象

        Raises:
            底层驱动的原始异常（由 query() 包装为 DatabaseError）
        """
        handle = self._ensure_connected()
        sql = sql.strip()
        params = list(params) if params else []

        start = time.perf_counter()
        if not params:
            cursor = handle.cursor()
            cursor.execute(sql)
            statement = Statement(cursor, sql, params)
            self._log(start, f"[Raw query] {sql}")
        else:
            native_sql = self.dialect.translate_placeholders(sql)
            if cache_statement:
                key = sql_hash(sql)
                with self._lock:
                    cursor = self._statement_cache.get(key)
                    if cursor is None:
                        message = "Prepared statement - Cache miss"
                        cursor = self._statement_cache[key] = handle.cursor()
                    else:
                        message = "Prepared statement - Cache hit"
            else:
                message = "Prepared statement"
                cursor = handle.cursor()
            cursor.execute(native_sql, params)
            statement = Statement(cursor, sql, params, native_sql)
            self._log(start, f"[{message}] {sql}", params)

        if is_insert_sql(sql) and statement.last_row_id:
            self._last_insert_id = statement.last_row_id
        return statement

    def query(
        self,
        sql: str,
        params: Optional[Sequence[Any]] = None,
        cache_statement: bool = False
    ) -> ResultSet:
        """
        执行 SQL 并返回结果集

        Raises:
            DatabaseError: 底层执行失败，异常中携带代入参数后的 SQL
        """
        try:
            statement = self.execute(sql, params, cache_statement)
        except SlimDbException:
            raise
        except Exception as e:
            rendered = render_sql(sql.strip(), params)
            logger.warning("Query failed on '%s': %s - %s", self.name, e, rendered)
            raise DatabaseError(str(e), connection=self.name, sql=rendered) from e
        return ResultSet(self, statement, params)

    def last_insert_id(self) -> Any:
        """最近一次 INSERT/REPLACE 产生的自增 ID"""
        return self._last_insert_id

    # -- 方言操作 --

    def quote(self, expr: str) -> str:
        return self.dialect.quote(expr)

    def quote_columns(self, columns: Union[str, Sequence[str]]) -> str:
        return self.dialect.quote_columns(columns)

    def limit_clause(self, offset: Any = 0, limit: Any = 0) -> str:
        return self.dialect.limit_clause(offset, limit)

    def db_name(self) -> str:
        return self.dialect.db_name(self)

    def list_tables(self) -> List[str]:
        return self.dialect.list_tables(self)

    def truncate(self, table: str) -> None:
        self.dialect.truncate(self, table)

    def schema(self, table: Optional[str] = None, force_reload: bool = False) -> Union[TableSchema, List[str]]:
        """
        获取表结构（按表缓存）

        Args:
            table: 表名；为 None 时返回全部表名
            force_reload: 忽略缓存重新查询

        Returns:
            {字段名: ColumnInfo}，或表名列表
        """
        if table is None:
            return self.list_tables()
        return self.schema_cache.get(
            table,
            lambda name: self.dialect.describe_table(self, name),
            force_reload
        )

    def invalidate_schema(self, table: Optional[str] = None) -> None:
        self.schema_cache.invalidate(table)

    # -- 工厂方法 --

    def table(self, name: str, primary_key: Optional[str] = None) -> Table:
        """创建 Table 对象"""
        if not name:
            raise ArgumentError(f"Table '{name}' is not valid!", connection=self.name)
        return Table(self, name, primary_key)

    def record(self, table: str, data: Optional[Dict[str, Any]] = None) -> 'Record':
        """创建绑定到表的 Record 对象"""
        return self.table(table).record(data)

    def __repr__(self) -> str:
        return f"Connection(name={self.name!r}, engine={self.engine!r}, connected={self.is_connected})"
