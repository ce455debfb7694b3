"""
SlimDb Record 测试

测试 Record 的功能：
- 新建记录 save() 执行 INSERT 并按自增 ID 重新加载
- 已加载记录 save() 只 UPDATE 修改过的字段
- 主键加载后不可修改，未知字段被忽略
- load / reload / delete
"""

import os
import sys
import unittest
from typing import List

# 添加项目根目录到路径
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from slimdb import (
    ArgumentError,
    DatabaseRegistry,
    PrimaryKeyNotFoundError,
    Record,
    SchemaError,
    sqlite_factory,
)

USERS_DDL = (
    "CREATE TABLE users ("
    "id INTEGER PRIMARY KEY AUTOINCREMENT, "
    "name VARCHAR(50) NOT NULL, "
    "email TEXT)"
)


class RecordTestCase(unittest.TestCase):
    """记录底层执行 SQL 的测试基类"""

    def setUp(self) -> None:
        """测试前设置"""
        self.executed: List[str] = []
        connect = sqlite_factory()
        executed = self.executed

        class Cursor:
            def __init__(self, cursor):
                self._cursor = cursor

            def execute(self, sql, *args):
                executed.append(sql)
                return self._cursor.execute(sql, *args)

            def __getattr__(self, name):
                return getattr(self._cursor, name)

        class Conn:
            def __init__(self, conn):
                self._conn = conn

            def cursor(self):
                return Cursor(self._conn.cursor())

            def close(self):
                self._conn.close()

        self.db = DatabaseRegistry()
        self.db.configure('main', 'sqlite', lambda: Conn(connect()))
        self.db.set_default_connection('main')
        self.db.query(USERS_DDL)
        self.users = self.db.table('users')
        self.users.insert({'name': 'Ann', 'email': 'ann@x.com'}).run()

    def tearDown(self) -> None:
        """测试后清理"""
        self.db.close()

    def writes(self) -> List[str]:
        """已执行的写语句"""
        return [sql for sql in self.executed if sql.split(' ', 1)[0] in ('INSERT', 'UPDATE', 'DELETE')]


class TestRecordInsert(RecordTestCase):
    """新建记录测试"""

    def test_save_new(self) -> None:
        """新记录 save() 执行 INSERT 并加载自增主键"""
        user = self.users.record({'name': 'Bob'})
        self.assertFalse(user.is_loaded)
        self.assertEqual(user.dirty, {'name': 'Bob'})

        self.assertTrue(user.save())
        self.assertTrue(user.is_loaded)
        self.assertEqual(user.id, 2)
        self.assertEqual(user.name, 'Bob')
        self.assertIsNone(user.email)
        self.assertEqual(user.dirty, {})
        self.assertEqual(self.writes()[-1], 'INSERT INTO [users] ([name]) VALUES (?)')

    def test_save_with_explicit_pk(self) -> None:
        """数据中包含主键时使用该主键加载"""
        user = self.db.record('users', {'id': 10, 'name': 'Cid'})
        user.save()
        self.assertEqual(user.id, 10)
        self.assertEqual(self.users.count_by_id(10), 1)

    def test_unknown_field_ignored(self) -> None:
        """不在表结构中的字段被忽略"""
        user = self.users.record({'name': 'Bob', 'age': 30})
        user.nickname = 'b'
        user['other'] = 1
        self.assertEqual(user.dirty, {'name': 'Bob'})
        with self.assertRaises(AttributeError):
            _ = user.nickname

    def test_set_variants(self) -> None:
        """set(key, value) 与 set(mapping)"""
        user = self.users.record()
        user.set('name', 'Bob').set({'email': 'b@x.com', 'tags': ['x']})
        self.assertEqual(user.to_dict(), {'name': 'Bob', 'email': 'b@x.com'})
        with self.assertRaises(ArgumentError):
            user.set('name')

    def test_load_missing_then_save(self) -> None:
        """加载不存在的主键：主键作为修改保留，save() 执行 INSERT"""
        user = self.users.load(42)
        self.assertFalse(user.is_loaded)
        self.assertEqual(user.dirty, {'id': 42})

        user.name = 'Dan'
        user.save()
        self.assertTrue(user.is_loaded)
        self.assertEqual(self.users.first_by_id(42).name, 'Dan')


class TestRecordUpdate(RecordTestCase):
    """已加载记录测试"""

    def test_first_by_id(self) -> None:
        user = self.users.first_by_id(1)
        self.assertIsInstance(user, Record)
        self.assertTrue(user.is_loaded)
        self.assertEqual(user.name, 'Ann')
        self.assertIsNone(self.users.first_by_id(99))

    def test_save_without_changes_issues_no_write(self) -> None:
        """没有修改时 save() 不执行任何语句"""
        user = self.users.first_by_id(1)
        executed = len(self.executed)
        self.assertTrue(user.save())
        self.assertEqual(len(self.executed), executed)
        self.assertEqual(self.users.first({'id': 1})['name'], 'Ann')

    def test_assign_same_value_is_not_dirty(self) -> None:
        user = self.users.load(1)
        user.name = 'Zed'
        user.name = 'Ann'
        self.assertEqual(user.dirty, {})

    def test_sequential_updates_only_dirty_fields(self) -> None:
        """两次更新各自只包含上次保存后修改的字段"""
        user = self.users.load(1)
        user.name = 'Anna'
        user.save()
        user.email = 'anna@x.com'
        user.save()

        self.assertEqual(self.writes()[-2:], [
            'UPDATE [users] SET [name] = ? WHERE [id] = ?',
            'UPDATE [users] SET [email] = ? WHERE [id] = ?',
        ])
        messages = [entry.message for entry in self.db.query_log if 'UPDATE' in entry.message]
        self.assertEqual(messages, [
            "main - [Prepared statement] UPDATE [users] SET [name] = 'Anna' WHERE [id] = 1",
            "main - [Prepared statement] UPDATE [users] SET [email] = 'anna@x.com' WHERE [id] = 1",
        ])
        self.assertEqual(self.users.first({'id': 1}), {'id': 1, 'name': 'Anna', 'email': 'anna@x.com'})

    def test_primary_key_immutable_after_load(self) -> None:
        """加载后主键赋值被忽略"""
        user = self.users.load(1)
        user.id = 99
        user['id'] = 98
        self.assertEqual(user.id, 1)
        self.assertEqual(user.dirty, {})

    def test_update_with_cached_statement(self) -> None:
        user = self.users.load(1).cache_statement()
        user.name = 'A1'
        user.save()
        user.name = 'A2'
        user.save()
        messages = [entry.message for entry in self.db.query_log if 'UPDATE' in entry.message]
        self.assertIn('Cache miss', messages[0])
        self.assertIn('Cache hit', messages[1])
        self.assertEqual(self.users.first_by_id(1).name, 'A2')

    def test_reload(self) -> None:
        user = self.users.load(1)
        self.users.update({'name': 'Changed'}).where_equals({'id': 1}).run()
        self.assertEqual(user.name, 'Ann')
        user.reload()
        self.assertEqual(user.name, 'Changed')

    def test_load_invalid_pk(self) -> None:
        with self.assertRaises(ArgumentError):
            self.users.load(None)
        with self.assertRaises(ArgumentError):
            self.users.load('')

    def test_save_without_primary_key_column(self) -> None:
        """查询结果未包含主键时 save() 抛出 ArgumentError，不修改数据"""
        user = self.users.select('name').run().as_record().get_row()
        self.assertTrue(user.is_loaded)
        user.name = 'Zed'
        with self.assertRaises(ArgumentError) as ctx:
            user.save()
        self.assertIn("'id'", str(ctx.exception))
        self.assertEqual(self.users.first({'id': 1})['name'], 'Ann')

    def test_mapping_protocol(self) -> None:
        user = self.users.load(1)
        self.assertIn('name', user)
        self.assertEqual(len(user), 3)
        self.assertEqual(dict(user), {'id': 1, 'name': 'Ann', 'email': 'ann@x.com'})
        self.assertEqual(user['email'], 'ann@x.com')
        self.assertEqual(user.pk_value(), 1)
        self.assertEqual(user.table_name(), 'users')


class TestRecordDelete(RecordTestCase):
    """删除测试"""

    def test_delete(self) -> None:
        user = self.users.load(1)
        self.assertTrue(user.delete())
        self.assertEqual(self.writes()[-1], 'DELETE FROM [users] WHERE [id] = ?')
        self.assertEqual(self.users.count(), 0)
        self.assertFalse(user.is_loaded)
        self.assertEqual(user.to_dict(), {})

    def test_delete_without_pk(self) -> None:
        """主键未知时返回 False"""
        user = self.users.record({'name': 'Bob'})
        self.assertFalse(user.delete())
        self.assertEqual(self.users.count(), 1)


class TestStringPrimaryKey(RecordTestCase):
    """字符串主键包含 % 时按主键精确匹配"""

    def setUp(self) -> None:
        super().setUp()
        self.db.query("CREATE TABLE codes (code VARCHAR(10) PRIMARY KEY, label TEXT)")
        self.codes = self.db.table('codes')
        for code in ['a%', 'ab', 'ac']:
            self.codes.insert({'code': code, 'label': code}).run()

    def labels(self) -> List[str]:
        return [row['label'] for row in self.codes.select().order_by('code').run()]

    def test_lookup_by_id(self) -> None:
        record = self.codes.first_by_id('a%')
        self.assertEqual(record.code, 'a%')
        self.assertEqual(self.codes.count_by_id('a%'), 1)
        self.assertEqual(self.codes.load('a%').label, 'a%')
        self.assertEqual(self.writes()[-1], 'INSERT INTO [codes] ([code], [label]) VALUES (?, ?)')
        self.assertIn('SELECT * FROM [codes] WHERE [code] = ? LIMIT 1', self.executed)

    def test_update_only_matching_row(self) -> None:
        record = self.codes.first_by_id('a%')
        record.label = 'changed'
        record.save()
        self.assertEqual(self.labels(), ['changed', 'ab', 'ac'])
        self.assertEqual(self.writes()[-1], 'UPDATE [codes] SET [label] = ? WHERE [code] = ?')

    def test_delete_only_matching_row(self) -> None:
        self.assertTrue(self.codes.first_by_id('a%').delete())
        self.assertEqual(self.codes.count(), 2)
        self.assertIsNone(self.codes.first_by_id('a%'))
        self.assertEqual(self.codes.count_by_id('a%'), 0)
        self.assertEqual(self.labels(), ['ab', 'ac'])


class TestPrimaryKey(RecordTestCase):
    """主键查找测试"""

    def test_table_without_primary_key(self) -> None:
        self.db.query("CREATE TABLE logs (msg TEXT)")
        logs = self.db.table('logs')
        with self.assertRaises(PrimaryKeyNotFoundError):
            logs.pk_name()
        with self.assertRaises(SchemaError):
            logs.record({'msg': 'x'}).pk_name()

    def test_explicit_primary_key(self) -> None:
        self.db.query("CREATE TABLE logs (msg TEXT)")
        self.assertEqual(self.db.table('logs', primary_key='msg').pk_name(), 'msg')


if __name__ == '__main__':
    unittest.main()
