"""键值存储

存储端口：get(key) -> Optional[str]，set(key, value)。
核心逻辑与测试只依赖该接口，不依赖具体存储介质。
"""
from typing import Dict, Optional, Protocol

from fixwise.dao.base import BaseDAO


class KVStore(Protocol):
    """键值存储端口"""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...


class MemoryKVStore:
    """内存键值存储（测试与临时会话使用）"""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class SqliteKVStore(BaseDAO):
    """SQLite 键值存储（kv_store 表）"""

    def __init__(self, db_path: Optional[str] = None, auto_init: bool = True):
        """
        初始化存储

        Args:
            db_path: 数据库路径，为 None 时使用默认路径
            auto_init: 是否自动创建表结构
        """
        super().__init__(db_path)
        if auto_init:
            from fixwise.scripts.init_db import init_database
            init_database(self.db_path)

    def get(self, key: str) -> Optional[str]:
        """
        读取键值

        Args:
            key: 键

        Returns:
            值，不存在返回 None
        """
        with self.transaction() as cursor:
            cursor.execute("SELECT value FROM kv_store WHERE key = ?", (key,))
            row = cursor.fetchone()
            return row[0] if row else None

    def set(self, key: str, value: str) -> None:
        """
        写入键值（存在则覆盖）

        Args:
            key: 键
            value: 值
        """
        with self.transaction() as cursor:
            cursor.execute(
                """
                INSERT INTO kv_store (key, value, updated_at)
                VALUES (?, ?, CURRENT_TIMESTAMP)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = CURRENT_TIMESTAMP
                """,
                (key, value),
            )

    def keys(self) -> list:
        """列出所有键"""
        with self.transaction() as cursor:
            cursor.execute("SELECT key FROM kv_store ORDER BY key")
            return [row[0] for row in cursor.fetchall()]
