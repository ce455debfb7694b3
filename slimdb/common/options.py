"""
SlimDb 配置选项 dataclass 定义

连接注册时使用的选项，以及各引擎连接器（sqlite3 / PyMySQL）的连接参数。
"""
from dataclasses import dataclass, field
from typing import Dict, Optional, Union


@dataclass(slots=True)
class ConnectionOptions:
    """连接注册选项"""
    log_queries: bool = True  # 是否写入查询日志
    # 表名 -> 主键名，已知主键时跳过表结构查询
    primary_keys: Dict[str, str] = field(default_factory=dict)


@dataclass(slots=True)
class SqliteConnectorOptions:
    """SQLite 连接器配置选项"""
    database: str = ':memory:'  # 数据库文件路径
    check_same_thread: bool = True  # 检查同一线程
    timeout: Optional[float] = None  # 连接超时时间
    isolation_level: Optional[str] = None  # None 表示自动提交


@dataclass(slots=True)
class MysqlConnectorOptions:
    """MySQL 连接器配置选项（PyMySQL）"""
    host: str = 'localhost'
    port: int = 3306
    user: Optional[str] = None
    password: str = ''
    database: Optional[str] = None
    charset: str = 'utf8mb4'
    connect_timeout: Optional[float] = None  # 连接超时时间（秒）
    autocommit: bool = True  # 每条语句自动提交


# Connector 选项联合类型
ConnectorOptions = Union[SqliteConnectorOptions, MysqlConnectorOptions]


def get_default_connector_options(engine: str) -> ConnectorOptions:
    """根据引擎类型返回默认连接器选项"""
    defaults: Dict[str, ConnectorOptions] = {
        'sqlite': SqliteConnectorOptions(),
        'mysql': MysqlConnectorOptions(),
    }
    return defaults.get(engine, SqliteConnectorOptions())
