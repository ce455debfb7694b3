"""
SlimDb - 轻量数据库访问层

基于 DB-API 2.0 连接的链式查询构建器、表结构查询和微型 ORM。

    from slimdb import DatabaseRegistry, sqlite_factory, SqliteConnectorOptions

    db = DatabaseRegistry()
    db.configure('main', 'sqlite', sqlite_factory(SqliteConnectorOptions(database='app.db')))
    db.set_default_connection('main')

    users = db.table('users')
    users.insert({'name': 'Ann', 'email': 'a@x.com'}).run()
    row = users.first({'name': 'Ann'})
"""

from .common.exceptions import (
    SlimDbException,
    ConfigurationError,
    SchemaError,
    PrimaryKeyNotFoundError,
    DriverError,
    ArgumentError,
    DataFormatError,
    DatabaseError,
)
from .common.options import (
    ConnectionOptions,
    SqliteConnectorOptions,
    MysqlConnectorOptions,
)
from .core import (
    ColumnType,
    ColumnInfo,
    SchemaCache,
    QueryLog,
    QueryLogEntry,
    Connection,
    Statement,
    DatabaseRegistry,
    sqlite_factory,
    mysql_factory,
    Table,
    Record,
)
from .dialects import DatabaseDialect, SqliteDialect, MysqlDialect, get_dialect, get_available_engines
from .query import (
    SelectQuery,
    CountQuery,
    InsertQuery,
    UpdateQuery,
    DeleteQuery,
    ResultSet,
    ResultMode,
    quote,
    quote_columns,
)

__version__ = '0.1.0'

__all__ = [
    # Registry & connection
    'DatabaseRegistry',
    'Connection',
    'Statement',
    'sqlite_factory',
    'mysql_factory',
    # Options
    'ConnectionOptions',
    'SqliteConnectorOptions',
    'MysqlConnectorOptions',
    # Schema
    'ColumnType',
    'ColumnInfo',
    'SchemaCache',
    # Query log
    'QueryLog',
    'QueryLogEntry',
    # Table & ORM
    'Table',
    'Record',
    # Dialects
    'DatabaseDialect',
    'SqliteDialect',
    'MysqlDialect',
    'get_dialect',
    'get_available_engines',
    # Query
    'SelectQuery',
    'CountQuery',
    'InsertQuery',
    'UpdateQuery',
    'DeleteQuery',
    'ResultSet',
    'ResultMode',
    'quote',
    'quote_columns',
    # Exceptions
    'SlimDbException',
    'ConfigurationError',
    'SchemaError',
    'PrimaryKeyNotFoundError',
    'DriverError',
    'ArgumentError',
    'DataFormatError',
    'DatabaseError',
]
