"""
连接与语句执行测试

覆盖范围：
- 懒连接
- 原始查询 / 预编译语句 / 语句缓存
- 查询日志与 log_queries 开关
- 表结构缓存
- last_insert_id、清空表
"""

from slimdb import (
    ConnectionOptions,
    DatabaseRegistry,
    sqlite_factory,
)


def _count(executed, prefix):
    return sum(1 for sql in executed if sql.startswith(prefix))


class TestLazyConnect:
    """懒连接测试"""

    def test_factory_called_once_on_first_statement(self):
        calls = []
        connect = sqlite_factory()

        def factory():
            calls.append(1)
            return connect()

        with DatabaseRegistry() as db:
            conn = db.configure('main', 'sqlite', factory)
            assert calls == []
            assert not conn.is_connected

            db.query("SELECT 1", connection='main')
            db.query("SELECT 2", connection='main')
            assert calls == [1]
            assert conn.is_connected

    def test_reconnect_after_close(self):
        with DatabaseRegistry() as db:
            conn = db.configure('main', 'sqlite', sqlite_factory())
            conn.query("SELECT 1")
            conn.close()
            assert not conn.is_connected
            assert conn.query("SELECT 1").get_val() == 1


class TestQueryLog:
    """查询日志测试"""

    def test_connect_and_raw_query_logged(self):
        with DatabaseRegistry() as db:
            db.configure('main', 'sqlite', sqlite_factory())
            db.query("SELECT 1", connection='main')

            messages = [entry.message for entry in db.query_log]
            assert messages == [
                'main - Establish database connection(main)',
                'main - [Raw query] SELECT 1',
            ]
            assert all(entry.elapsed >= 0 for entry in db.query_log)
            assert db.query_log.total_time() >= 0

    def test_prepared_statement_logged_with_params(self, sqlite_registry, users):
        sqlite_registry.query_log.clear()
        users.select().where_equals({'name': 'Ann'}).run()
        assert [e.message for e in sqlite_registry.query_log] == [
            "main - [Prepared statement] SELECT * FROM [users] WHERE [name] = 'Ann'"
        ]

    def test_log_queries_disabled(self):
        with DatabaseRegistry() as db:
            db.configure('quiet', 'sqlite', sqlite_factory(), ConnectionOptions(log_queries=False))
            db.query("SELECT 1", connection='quiet')
            assert len(db.query_log) == 0

    def test_log_shared_across_connections(self):
        with DatabaseRegistry() as db:
            db.configure('a', 'sqlite', sqlite_factory())
            db.configure('b', 'sqlite', sqlite_factory())
            db.query("SELECT 1", connection='a')
            db.query("SELECT 1", connection='b')
            prefixes = [entry.message.split(' - ')[0] for entry in db.query_log]
            assert prefixes == ['a', 'a', 'b', 'b']


class TestStatementCache:
    """预编译语句缓存测试"""

    def test_cache_miss_then_hit(self, sqlite_registry, users):
        sqlite_registry.query_log.clear()
        for name in ['A', 'B']:
            users.insert({'name': name}).cache_statement().run()

        assert [e.message for e in sqlite_registry.query_log] == [
            "main - [Prepared statement - Cache miss] INSERT INTO [users] ([name]) VALUES ('A')",
            "main - [Prepared statement - Cache hit] INSERT INTO [users] ([name]) VALUES ('B')",
        ]
        assert users.count() == 2

    def test_uncached_statement(self, sqlite_registry, users):
        sqlite_registry.query_log.clear()
        users.insert({'name': 'A'}).run()
        assert sqlite_registry.query_log.entries()[0].message.startswith('main - [Prepared statement] INSERT')


class TestSchemaCache:
    """表结构缓存测试"""

    def test_schema_loaded_once(self, users, executed):
        """多次获取表结构只查询一次"""
        first = users.schema()
        second = users.schema()
        users.cols()
        assert first is second
        assert _count(executed, 'PRAGMA table_info') == 1

    def test_force_reload(self, users, executed):
        users.schema()
        users.schema(force_reload=True)
        assert _count(executed, 'PRAGMA table_info') == 2

    def test_invalidate(self, sqlite_registry, users, executed):
        users.schema()
        conn = sqlite_registry.connection()
        assert 'users' in conn.schema_cache
        conn.invalidate_schema('users')
        assert 'users' not in conn.schema_cache
        users.schema()
        assert _count(executed, 'PRAGMA table_info') == 2

    def test_configured_primary_key_skips_schema(self):
        """已配置主键时不需要查询表结构"""
        with DatabaseRegistry() as db:
            db.configure('main', 'sqlite', sqlite_factory(), ConnectionOptions(primary_keys={'users': 'id'}))
            assert db.table('users', connection='main').pk_name() == 'id'
            assert db.query_log.entries() == []


class TestInsertAndTruncate:
    """插入、last_insert_id 与清空表"""

    def test_insert_then_first(self, users):
        """插入后按名称查询得到同一条记录"""
        users.insert({'name': 'Ann', 'email': 'ann@x.com'}).run()
        new_id = users.last_insert_id()
        row = users.first({'name': 'Ann'})
        assert row['id'] == new_id
        assert row['email'] == 'ann@x.com'

    def test_result_last_insert_id(self, users):
        rs = users.insert({'name': 'Ann'}).run()
        assert rs.last_insert_id() == 1
        assert rs.row_count() == 1

    def test_truncate_resets_sequence(self, seeded_users):
        assert seeded_users.count() == 3
        seeded_users.truncate()
        assert seeded_users.count() == 0

        seeded_users.insert({'name': 'Dan'}).run()
        assert seeded_users.last_insert_id() == 1

    def test_count_helpers(self, seeded_users):
        assert seeded_users.count({'name': 'Bob'}) == 1
        assert seeded_users.count({'name': 'B%'}) == 1
        assert seeded_users.count_by_id(3) == 1
        assert seeded_users.count_by_id(99) == 0
        assert seeded_users.count_query().where('score > ?', 1.8).run() == 2
