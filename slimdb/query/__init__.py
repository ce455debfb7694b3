"""
SlimDb 查询子系统

包含标识符引用、语句构建器和结果集
"""

from .quoting import quote, quote_columns
from .builder import (
    Clause,
    JoinClause,
    Query,
    FilterableQuery,
    SelectQuery,
    CountQuery,
    InsertQuery,
    UpdateQuery,
    DeleteQuery,
)
from .result import ResultSet, ResultMode

__all__ = [
    # Quoting
    'quote',
    'quote_columns',
    # Builder
    'Clause',
    'JoinClause',
    'Query',
    'FilterableQuery',
    'SelectQuery',
    'CountQuery',
    'InsertQuery',
    'UpdateQuery',
    'DeleteQuery',
    # Result
    'ResultSet',
    'ResultMode',
]
