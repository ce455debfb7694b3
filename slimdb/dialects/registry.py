"""
SlimDb 方言注册表

引擎种类是封闭集合，每种引擎一个方言实例，进程内共享、只读。
"""

from typing import Dict, List, Type

from .base import DatabaseDialect
from .dialect_mysql import MysqlDialect
from .dialect_sqlite import SqliteDialect
from ..common.exceptions import DriverError

DIALECTS: Dict[str, Type[DatabaseDialect]] = {
    SqliteDialect.ENGINE_NAME: SqliteDialect,
    MysqlDialect.ENGINE_NAME: MysqlDialect,
}

_instances: Dict[str, DatabaseDialect] = {}


def get_dialect(engine: str) -> DatabaseDialect:
    """
    获取引擎对应的方言实例

    Args:
        engine: 引擎名称（'sqlite' / 'mysql'）

    Returns:
        方言实例（同一引擎返回同一实例）

    Raises:
        DriverError: 未知引擎
    """
    key = (engine or '').lower()
    if key not in DIALECTS:
        raise DriverError(
            f"Invalid driver type '{engine}'. Available: {', '.join(sorted(DIALECTS))}",
            details={'engine': engine}
        )
    if key not in _instances:
        _instances[key] = DIALECTS[key]()
    return _instances[key]


def get_available_engines() -> List[str]:
    """返回驱动库已安装的引擎列表"""
    return [name for name, cls in DIALECTS.items() if cls.is_available()]
