"""数据库初始化脚本

创建 SQLite 数据库的表结构

表结构：
- kv_store: 键值存储（诊断历史、专家知识以 JSON 文本保存）
"""
import sqlite3
from pathlib import Path
from typing import Optional

from fixwise.dao.base import get_default_db_path


SCHEMA_SQL = """
-- 键值存储表
CREATE TABLE IF NOT EXISTS kv_store (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,                       -- JSON 文本
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);
"""


def init_database(db_path: Optional[str] = None, verbose: bool = False) -> str:
    """
    初始化数据库（仅创建表结构，可重复执行）

    Args:
        db_path: 数据库路径，默认 data/fixwise.db
        verbose: 是否打印进度

    Returns:
        数据库路径
    """
    if db_path is None:
        db_path = get_default_db_path()

    Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(db_path)
    try:
        conn.executescript(SCHEMA_SQL)
        conn.commit()
    finally:
        conn.close()

    if verbose:
        print(f"数据库已初始化: {db_path}")
    return db_path


if __name__ == "__main__":
    init_database(verbose=True)
