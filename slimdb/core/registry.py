"""
SlimDb 数据库注册表

DatabaseRegistry 持有全部已注册连接、默认连接名以及共享的查询日志。
应用启动时创建，关闭时调用 close()；同一进程可以存在多个互不影响的注册表。

使用方式：
    from slimdb import DatabaseRegistry, sqlite_factory

    db = DatabaseRegistry()
    db.configure('main', 'sqlite', sqlite_factory())
    db.set_default_connection('main')

    users = db.table('users')
    users.insert({'name': 'Ann'}).run()
"""

import logging
import threading
from typing import Any, Dict, List, Optional, Sequence, TYPE_CHECKING

from ..common.exceptions import ArgumentError, ConfigurationError
from ..common.options import ConnectionOptions
from .connection import Connection, ConnectionFactory
from .querylog import QueryLog

if TYPE_CHECKING:
    from .record import Record
    from .table import Table
    from ..query.result import ResultSet

logger = logging.getLogger(__name__)


class DatabaseRegistry:
    """连接注册表"""

    def __init__(self) -> None:
        self._connections: Dict[str, Connection] = {}
        self._default: Optional[str] = None
        self._lock = threading.Lock()
        self.query_log = QueryLog()

    def configure(
        self,
        name: str,
        engine: str,
        factory: ConnectionFactory,
        options: Optional[ConnectionOptions] = None
    ) -> Connection:
        """
        注册连接（不会立即连接数据库）

        Args:
            name: 连接名
            engine: 引擎名称（'sqlite' / 'mysql'）
            factory: 连接工厂
            options: 连接选项

        Returns:
            新注册的 Connection

        Raises:
            DriverError: 未知引擎
        """
        if not name:
            raise ConfigurationError("Missing connection name index!")
        connection = Connection(name, engine, factory, self.query_log, options)
        with self._lock:
            previous = self._connections.get(name)
            self._connections[name] = connection
        if previous is not None:
            previous.close()
        logger.debug("Configured connection '%s' (%s)", name, connection.engine)
        return connection

    def is_configured(self, name: str) -> bool:
        return name in self._connections

    def set_default_connection(self, name: str) -> None:
        """
        设置默认连接名

        Raises:
            ConfigurationError: 连接名未注册
        """
        if name not in self._connections:
            raise ConfigurationError(f"Invalid connection name index! ({name})", connection=name)
        self._default = name

    @property
    def default_connection(self) -> Optional[str]:
        return self._default

    @property
    def connection_names(self) -> List[str]:
        return list(self._connections)

    def connection(self, name: Optional[str] = None) -> Connection:
        """
        获取连接句柄

        Args:
            name: 连接名，为空时使用默认连接

        Raises:
            ConfigurationError: 连接名未注册或未设置默认连接
        """
        if not name:
            name = self._default
        if not name:
            raise ConfigurationError("Missing connection name index!")
        try:
            return self._connections[name]
        except KeyError:
            raise ConfigurationError(f"Invalid connection name index! ({name})", connection=name)

    def table(self, name: str, connection: Optional[str] = None, primary_key: Optional[str] = None) -> 'Table':
        """创建 Table 对象"""
        if not name:
            raise ArgumentError(f"Table '{name}' is not valid!")
        return self.connection(connection).table(name, primary_key)

    def record(
        self,
        table: str,
        data: Optional[Dict[str, Any]] = None,
        connection: Optional[str] = None
    ) -> 'Record':
        """创建绑定到表的 Record 对象"""
        return self.table(table, connection).record(data)

    def query(
        self,
        sql: str,
        params: Optional[Sequence[Any]] = None,
        connection: Optional[str] = None
    ) -> 'ResultSet':
        """在指定（或默认）连接上执行原始 SQL"""
        return self.connection(connection).query(sql, params)

    def close(self) -> None:
        """关闭所有已建立的连接"""
        with self._lock:
            connections = list(self._connections.values())
        for connection in connections:
            connection.close()

    def __contains__(self, name: object) -> bool:
        return name in self._connections

    def __enter__(self) -> 'DatabaseRegistry':
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
