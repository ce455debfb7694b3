"""
SlimDb 连接器

根据连接器选项构造懒连接工厂（零参数函数），注册连接时传给 DatabaseRegistry。
"""

import sqlite3
from typing import Any, Callable, Dict, Optional

from ..common.exceptions import DriverError
from ..common.options import MysqlConnectorOptions, SqliteConnectorOptions, get_default_connector_options


def sqlite_factory(options: Optional[SqliteConnectorOptions] = None) -> Callable[[], sqlite3.Connection]:
    """
    构造 SQLite 连接工厂

    Args:
        options: SQLite 连接器选项，默认内存数据库、自动提交

    Returns:
        调用时返回 sqlite3.Connection 的函数
    """
    if options is None:
        options = get_default_connector_options('sqlite')
    assert isinstance(options, SqliteConnectorOptions)

    def connect() -> sqlite3.Connection:
        kwargs: Dict[str, Any] = {
            'check_same_thread': options.check_same_thread,
            'isolation_level': options.isolation_level,
        }
        if options.timeout is not None:
            kwargs['timeout'] = options.timeout
        return sqlite3.connect(options.database, **kwargs)

    return connect


def mysql_factory(options: Optional[MysqlConnectorOptions] = None) -> Callable[[], Any]:
    """
    构造 MySQL 连接工厂（PyMySQL）

    PyMySQL 在首次连接时才导入，未安装时抛出 DriverError。

    Args:
        options: MySQL 连接器选项，默认连接 localhost:3306

    Returns:
        调用时返回 pymysql 连接的函数
    """
    if options is None:
        options = get_default_connector_options('mysql')
    assert isinstance(options, MysqlConnectorOptions)

    def connect() -> Any:
        try:
            import pymysql
        except ImportError:
            raise DriverError("PyMySQL is required for MySQL engine. Install with: pip install slimdb[mysql]")

        kwargs: Dict[str, Any] = {
            'host': options.host,
            'port': options.port,
            'password': options.password,
            'charset': options.charset,
            'autocommit': options.autocommit,
        }
        if options.user is not None:
            kwargs['user'] = options.user
        if options.database is not None:
            kwargs['database'] = options.database
        if options.connect_timeout is not None:
            kwargs['connect_timeout'] = options.connect_timeout
        return pymysql.connect(**kwargs)

    return connect
