"""
Pytest 配置和共享 fixtures

- sqlite_registry: 内存 SQLite 注册表，已建好 users 表
- users: users 表对象
- executed: 底层连接实际执行过的 SQL 列表
- mysql_registry / fake_mysql: 使用伪造 DB-API 连接的 MySQL 注册表
"""
import sqlite3
import sys
from pathlib import Path
from typing import Any, Dict, Generator, List, Optional, Sequence, Tuple

import pytest

# 确保可以导入 slimdb
sys.path.insert(0, str(Path(__file__).parent.parent))

from slimdb import DatabaseRegistry, Table, sqlite_factory  # noqa: E402
from slimdb.common.options import ConnectionOptions, SqliteConnectorOptions  # noqa: E402

USERS_DDL = (
    "CREATE TABLE users ("
    "id INTEGER PRIMARY KEY AUTOINCREMENT, "
    "name VARCHAR(50) NOT NULL, "
    "email TEXT, "
    "score REAL, "
    "active BOOLEAN DEFAULT 1)"
)


class RecordingCursor:
    """记录执行 SQL 的 sqlite3 游标代理"""

    def __init__(self, cursor: sqlite3.Cursor, log: List[str]):
        self._cursor = cursor
        self._log = log

    def execute(self, sql: str, *args: Any) -> Any:
        self._log.append(sql)
        return self._cursor.execute(sql, *args)

    def __getattr__(self, name: str) -> Any:
        return getattr(self._cursor, name)


class RecordingConnection:
    """记录执行 SQL 的 sqlite3 连接代理"""

    def __init__(self, conn: sqlite3.Connection):
        self._conn = conn
        self.executed: List[str] = []

    def cursor(self) -> RecordingCursor:
        return RecordingCursor(self._conn.cursor(), self.executed)

    def close(self) -> None:
        self._conn.close()


def recording_sqlite_factory(database: str = ':memory:') -> Any:
    connect = sqlite_factory(SqliteConnectorOptions(database=database))

    def factory() -> RecordingConnection:
        return RecordingConnection(connect())

    return factory


@pytest.fixture
def sqlite_registry() -> Generator[DatabaseRegistry, None, None]:
    """内存 SQLite 注册表（默认连接 main，含 users 表）"""
    registry = DatabaseRegistry()
    registry.configure('main', 'sqlite', recording_sqlite_factory())
    registry.set_default_connection('main')
    registry.query(USERS_DDL)
    yield registry
    registry.close()


@pytest.fixture
def users(sqlite_registry: DatabaseRegistry) -> Table:
    return sqlite_registry.table('users')


@pytest.fixture
def executed(sqlite_registry: DatabaseRegistry) -> List[str]:
    """底层连接实际执行过的 SQL（按执行顺序）"""
    return sqlite_registry.connection().raw.executed


@pytest.fixture
def seeded_users(users: Table) -> Table:
    """插入三条记录的 users 表"""
    for name, email, score in [('Ann', 'ann@x.com', 1.5), ('Bob', 'bob@x.com', 2.0), ('Cid', None, 3.5)]:
        users.insert({'name': name, 'email': email, 'score': score}).run()
    return users


# -- MySQL 伪造连接 --

Response = Tuple[List[str], List[tuple]]


class FakeMysqlCursor:
    """按 SQL 前缀返回预设结果的 DB-API 游标"""

    def __init__(self, conn: 'FakeMysqlConnection'):
        self._conn = conn
        self._rows: List[tuple] = []
        self.description: Optional[List[tuple]] = None
        self.rowcount = -1
        self.lastrowid: Optional[int] = None

    def execute(self, sql: str, params: Optional[Sequence[Any]] = None) -> int:
        self._conn.executed.append((sql, list(params) if params is not None else None))
        for prefix, (columns, rows) in self._conn.responses.items():
            if sql.startswith(prefix):
                self.description = [(name, None, None, None, None, None, None) for name in columns]
                self._rows = list(rows)
                self.rowcount = len(rows)
                return self.rowcount
        self.description = None
        self._rows = []
        self.rowcount = self._conn.affected_rows
        if sql.startswith('INSERT'):
            self._conn.next_id += 1
            self.lastrowid = self._conn.next_id
        return self.rowcount

    def fetchone(self) -> Optional[tuple]:
        return self._rows.pop(0) if self._rows else None

    def fetchall(self) -> List[tuple]:
        rows, self._rows = self._rows, []
        return rows

    def close(self) -> None:
        pass


class FakeMysqlConnection:
    """伪造的 PyMySQL 连接"""

    def __init__(self) -> None:
        self.responses: Dict[str, Response] = {}
        self.executed: List[Tuple[str, Optional[List[Any]]]] = []
        self.affected_rows = 1
        self.next_id = 0
        self.closed = False

    def cursor(self) -> FakeMysqlCursor:
        return FakeMysqlCursor(self)

    def close(self) -> None:
        self.closed = True


MYSQL_USERS_DESCRIBE: Response = (
    ['Field', 'Type', 'Null', 'Key', 'Default', 'Extra'],
    [
        ('id', 'int(10) unsigned', 'NO', 'PRI', None, 'auto_increment'),
        ('name', 'varchar(50)', 'NO', '', None, ''),
        ('status', "enum('a','b','c')", 'YES', '', 'a', ''),
        ('price', 'decimal(10,2)', 'YES', '', None, ''),
        ('created', 'datetime', 'YES', '', None, ''),
    ],
)


@pytest.fixture
def fake_mysql() -> FakeMysqlConnection:
    conn = FakeMysqlConnection()
    conn.responses['DESCRIBE'] = MYSQL_USERS_DESCRIBE
    conn.responses['SHOW TABLES'] = (['Tables_in_app'], [('orders',), ('users',)])
    conn.responses['SELECT DATABASE()'] = (['DATABASE()'], [('app',)])
    conn.responses['SELECT'] = (
        ['id', 'name', 'status', 'price', 'created'],
        [(1, 'Ann', 'a', 9.5, None), (2, 'Bob', 'b', 1.0, None)],
    )
    return conn


@pytest.fixture
def mysql_registry(fake_mysql: FakeMysqlConnection) -> Generator[DatabaseRegistry, None, None]:
    registry = DatabaseRegistry()
    registry.configure('shop', 'mysql', lambda: fake_mysql, ConnectionOptions())
    registry.set_default_connection('shop')
    yield registry
    registry.close()
