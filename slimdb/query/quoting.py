"""
SlimDb 标识符引用

按引擎的引用模板（MySQL 用反引号，SQLite 用方括号）包裹表名/列名。
"""

import re
from typing import Sequence, Union

# 不需要引用的特殊片段
UNQUOTED_SEGMENTS = ('*', 'count(*)')

_ALIAS_RE = re.compile(r' as ', re.IGNORECASE)
_RAW_FRAGMENT_RE = re.compile(r'[\s()]')


def quote_segment(template: str, segment: str) -> str:
    """引用单个片段（不含 '.'）"""
    segment = segment.strip()
    if segment in UNQUOTED_SEGMENTS:
        return segment
    return template.format(segment)


def quote(template: str, expr: str) -> str:
    """
    引用标识符表达式

    支持 "table.column" 限定名和 "column AS alias" 别名。
    含空白或括号的表达式视为原始 SQL 片段，原样返回。

    Args:
        template: 引用模板，如 '`{}`' 或 '[{}]'
        expr: 标识符表达式

    Returns:
        引用后的表达式

    Example:
        quote('`{}`', 'users.name as n')  ->  '`users`.`name` AS n'
    """
    parts = _ALIAS_RE.split(expr, maxsplit=1)
    name = parts[0].strip()
    if name in UNQUOTED_SEGMENTS:
        quoted = name
    elif _RAW_FRAGMENT_RE.search(name):
        quoted = name
    else:
        quoted = '.'.join(quote_segment(template, item) for item in name.split('.'))
    if len(parts) > 1:
        quoted = f"{quoted} AS {parts[1].strip()}"
    return quoted


def quote_columns(template: str, columns: Union[str, Sequence[str]]) -> str:
    """
    引用列列表

    Args:
        template: 引用模板
        columns: 逗号分隔的字符串或列名序列

    Returns:
        以 ", " 连接的引用后列表
    """
    if isinstance(columns, str):
        columns = columns.split(',')
    return ', '.join(quote(template, item) for item in columns if item.strip())
