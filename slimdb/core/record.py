"""
SlimDb Record（微型 ORM）

Record 将一行数据绑定到表结构：
- 只保存表结构中存在的字段，未知字段的赋值被忽略
- 已加载的值和未保存的修改（dirty）分开存放，读取时修改覆盖加载值
- 是否从数据库加载由 is_loaded 标记决定 save() 走 UPDATE 还是 INSERT
- 从数据库加载后主键不可修改

注意：不支持复合主键。

使用方式：
    users = db.table('users')

    user = users.record({'name': 'Ann'})
    user.save()                 # INSERT，之后按新主键重新加载
    user.email = 'a@x.com'
    user.save()                 # UPDATE users SET email = ? WHERE id = ?
    user.delete()
"""

from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple, TYPE_CHECKING

from ..common.exceptions import ArgumentError

if TYPE_CHECKING:
    from .schema import TableSchema
    from .table import Table

_MISSING = object()


class Record:
    """绑定表结构的行对象"""

    def __init__(self, table: 'Table', data: Optional[Mapping[str, Any]] = None, loaded: bool = False):
        """
        Args:
            table: 所属表
            data: 初始数据（视为已加载的值）
            loaded: 数据是否来自数据库
        """
        object.__setattr__(self, '_table', table)
        object.__setattr__(self, '_data', {})
        object.__setattr__(self, '_dirty', {})
        object.__setattr__(self, '_loaded', False)
        object.__setattr__(self, '_cache_statement', False)
        if self.reset(data) and loaded:
            self._loaded = True

    # -- 元数据 --

    @property
    def table(self) -> 'Table':
        return self._table

    @property
    def is_loaded(self) -> bool:
        """数据是否来自数据库（决定 save() 执行 UPDATE 还是 INSERT）"""
        return self._loaded

    @property
    def dirty(self) -> Dict[str, Any]:
        """尚未保存的修改"""
        return dict(self._dirty)

    def schema(self) -> 'TableSchema':
        return self._table.schema()

    def table_name(self) -> str:
        return self._table.name

    def cols(self) -> List[str]:
        return self._table.cols()

    def pk_name(self) -> str:
        return self._table.pk_name()

    def pk_value(self) -> Any:
        return self.get(self.pk_name())

    # -- 读写字段 --

    def get(self, key: str, default: Any = None) -> Any:
        """读取字段（修改值优先于加载值）"""
        if key in self._dirty:
            return self._dirty[key]
        return self._data.get(key, default)

    def set(self, key: Any, value: Any = _MISSING) -> 'Record':
        """
        设置字段

        Example:
            record.set('name', 'Ann')
            record.set({'name': 'Ann', 'email': 'a@x.com'})

        Raises:
            ArgumentError: 参数既不是 (key, value) 也不是映射
        """
        if value is not _MISSING:
            self._set_field(key, value)
            return self
        if isinstance(key, Mapping):
            for name, item in key.items():
                if isinstance(name, str) and not isinstance(item, (list, dict)):
                    self._set_field(name, item)
            return self
        raise ArgumentError("Invalid arguments! Use set(key, value) or set(mapping)")

    def _set_field(self, key: str, value: Any) -> None:
        if key not in self.cols():
            return
        if self._loaded and key == self.pk_name():
            return
        if key in self._data and self._data[key] == value:
            self._dirty.pop(key, None)
        else:
            self._dirty[key] = value

    def to_dict(self) -> Dict[str, Any]:
        """合并视图：按表结构字段顺序，修改值覆盖加载值"""
        result: Dict[str, Any] = {}
        for field in self.cols():
            if field in self._data:
                result[field] = self._data[field]
            if field in self._dirty:
                result[field] = self._dirty[field]
        return result

    def reset(self, data: Optional[Mapping[str, Any]] = None) -> bool:
        """
        清空并重新填充（清除修改和已加载标记）

        Returns:
            是否填充了数据
        """
        self._dirty.clear()
        self._data.clear()
        self._loaded = False
        if not data:
            return False
        cols = self.cols()
        for key, value in data.items():
            if key in cols:
                self._data[key] = value
        return True

    # -- 持久化 --

    def cache_statement(self, flag: bool = True) -> 'Record':
        """写操作时缓存预编译语句（批量保存时使用）"""
        self._cache_statement = flag
        return self

    def save(self) -> bool:
        """
        保存修改

        没有修改时直接返回 True；已从数据库加载的记录只 UPDATE 修改过的字段，
        否则 INSERT 合并后的全部字段。保存后从数据库重新加载。

        Raises:
            ArgumentError: 已加载的记录缺少主键值（如 select('name') 的结果）
        """
        if not self._dirty:
            return True
        if self._loaded:
            return self._update_record()
        return self._insert_record()

    def _update_record(self) -> bool:
        pk_name = self.pk_name()
        pk = self._data.get(pk_name)
        if pk is None:
            # 查询结果未包含主键列时无法定位记录
            raise ArgumentError(
                f"Cannot update record without primary key '{pk_name}' value",
                table_name=self._table.name
            )
        (
            self._table._pk_clause(self._table.update(dict(self._dirty)), pk)
            .cache_statement(self._cache_statement)
            .run()
        )
        self.reload()
        return True

    def _insert_record(self) -> bool:
        merged = self.to_dict()
        self._table.insert(merged).cache_statement(self._cache_statement).run()
        pk_name = self.pk_name()
        pk = merged.get(pk_name)
        if pk is None:
            pk = self._table.last_insert_id()
        self.load(pk)
        return True

    def load(self, pk: Any) -> 'Record':
        """
        按主键从数据库加载

        记录不存在时清空对象，并把主键设为待保存的修改。

        Raises:
            ArgumentError: 主键值为空
        """
        if pk is None or pk == '':
            raise ArgumentError(f"Invalid id value! ({pk!r})", table_name=self._table.name)
        pk_name = self.pk_name()
        row = self._table._pk_clause(self._table.select(), pk).limit(1).run().get_row()
        if self.reset(row):
            self._loaded = True
        else:
            self._set_field(pk_name, pk)
        return self

    def reload(self) -> 'Record':
        """按当前主键重新加载"""
        return self.load(self.pk_value())

    def delete(self) -> bool:
        """
        删除数据库中的记录并清空对象

        Returns:
            主键未知时返回 False
        """
        pk_name = self.pk_name()
        pk = self._data.get(pk_name)
        if pk is None:
            return False
        self._table._pk_clause(self._table.delete(), pk).run()
        self.reset()
        return True

    # -- 魔术方法 --

    def __getattr__(self, key: str) -> Any:
        if key.startswith('_'):
            raise AttributeError(key)
        if key in self.cols():
            return self.get(key)
        raise AttributeError(f"'{self._table.name}' record has no field '{key}'")

    def __setattr__(self, key: str, value: Any) -> None:
        if key.startswith('_'):
            object.__setattr__(self, key, value)
        else:
            self._set_field(key, value)

    def __getitem__(self, key: str) -> Any:
        return self.get(key)

    def __setitem__(self, key: str, value: Any) -> None:
        self._set_field(key, value)

    def __contains__(self, key: object) -> bool:
        return key in self.to_dict()

    def __len__(self) -> int:
        return len(self.to_dict())

    def __iter__(self) -> Iterator[Tuple[str, Any]]:
        return iter(self.to_dict().items())

    def __repr__(self) -> str:
        return f"<Record {self._table.name} {self.to_dict()!r}>"
