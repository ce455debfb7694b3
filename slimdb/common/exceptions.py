"""
SlimDb 异常定义

异常层次：

    SlimDbException
    ├── ConfigurationError      连接名未注册、缺少默认连接
    ├── SchemaError             表结构问题（如找不到主键）
    ├── DriverError             未知引擎、驱动库缺失
    ├── ArgumentError           参数错误（offset/limit、空表名等）
    │   └── DataFormatError     insert/update 的 data 参数格式错误
    └── DatabaseError           底层数据库执行失败（携带渲染后的 SQL）
"""

from typing import Any, Dict, Optional


class SlimDbException(Exception):
    """SlimDb 基础异常类"""

    def __init__(
        self,
        message: str = '',
        *,
        connection: Optional[str] = None,
        table_name: Optional[str] = None,
        sql: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.connection = connection
        self.table_name = table_name
        self.sql = sql
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典（便于日志和序列化）"""
        result: Dict[str, Any] = {
            'error': type(self).__name__,
            'message': self.message,
        }
        if self.connection is not None:
            result['connection'] = self.connection
        if self.table_name is not None:
            result['table_name'] = self.table_name
        if self.sql is not None:
            result['sql'] = self.sql
        if self.details:
            result['details'] = dict(self.details)
        return result


class ConfigurationError(SlimDbException):
    """配置异常（连接名无效、缺少默认连接）"""


class SchemaError(SlimDbException):
    """表结构异常"""


class PrimaryKeyNotFoundError(SchemaError):
    """表中找不到主键（不支持复合主键）"""
    def __init__(self, table_name: str):
        super().__init__(
            f"Could not find primary key for table '{table_name}'",
            table_name=table_name
        )


class DriverError(SlimDbException):
    """驱动异常（未知引擎、驱动库缺失）"""


class ArgumentError(SlimDbException):
    """参数异常"""


class DataFormatError(ArgumentError):
    """insert/update 数据格式异常"""


class DatabaseError(SlimDbException):
    """
    数据库执行异常

    包装底层 DB-API 抛出的异常，sql 属性为已代入参数的 SQL 文本（仅用于诊断）。
    原始异常通过 __cause__ 保留。
    """

    def __init__(
        self,
        message: str,
        *,
        connection: Optional[str] = None,
        sql: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        full_message = f"{message} - {sql}" if sql else message
        super().__init__(full_message, connection=connection, sql=sql, details=details)
