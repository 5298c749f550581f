"""DAO 模块

提供数据访问对象，统一管理本地存储
"""

from fixwise.dao.base import BaseDAO
from fixwise.dao.kv_store import KVStore, MemoryKVStore, SqliteKVStore
from fixwise.dao.repositories import (
    HISTORY_KEY,
    KNOWLEDGE_KEY,
    HistoryRepository,
    KnowledgeRepository,
)

__all__ = [
    "BaseDAO",
    "KVStore",
    "MemoryKVStore",
    "SqliteKVStore",
    "HISTORY_KEY",
    "KNOWLEDGE_KEY",
    "HistoryRepository",
    "KnowledgeRepository",
]
