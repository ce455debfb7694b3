"""
SlimDb 查询日志

记录每次连接建立、语句执行的耗时与（代入参数后的）SQL 文本。
日志只追加，不自动清理。
"""

import logging
import threading
from typing import Iterator, List, NamedTuple

logger = logging.getLogger(__name__)


class QueryLogEntry(NamedTuple):
    """查询日志条目"""
    elapsed: float  # 耗时（秒）
    message: str  # "<连接名> - <消息>"


class QueryLog:
    """追加式查询日志"""

    def __init__(self) -> None:
        self._entries: List[QueryLogEntry] = []
        self._lock = threading.Lock()

    def append(self, connection: str, elapsed: float, message: str) -> QueryLogEntry:
        """
        追加一条日志

        Args:
            connection: 连接名
            elapsed: 耗时（秒）
            message: 日志消息

        Returns:
            新增的日志条目
        """
        entry = QueryLogEntry(elapsed, f"{connection} - {message}")
        with self._lock:
            self._entries.append(entry)
        logger.debug("%.6fs %s", entry.elapsed, entry.message)
        return entry

    def entries(self) -> List[QueryLogEntry]:
        """返回日志副本"""
        with self._lock:
            return list(self._entries)

    def total_time(self) -> float:
        """所有日志条目的总耗时"""
        with self._lock:
            return sum(entry.elapsed for entry in self._entries)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[QueryLogEntry]:
        return iter(self.entries())
