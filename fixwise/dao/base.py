"""DAO 基类

本地 SQLite 文件的路径解析与事务管理
"""
import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Optional

DB_FILENAME = "fixwise.db"


def get_default_db_path() -> str:
    """获取默认数据库路径

    优先使用环境变量 DATA_DIR，否则为项目根目录下的 data/fixwise.db
    """
    data_dir = os.environ.get("DATA_DIR")
    if data_dir:
        return str(Path(data_dir) / DB_FILENAME)
    return str(Path(__file__).parent.parent.parent / "data" / DB_FILENAME)


class BaseDAO:
    """DAO 基类

    每次操作打开一个短连接，语句在同一事务中执行，正常退出时提交。
    """

    def __init__(self, db_path: Optional[str] = None):
        """
        Args:
            db_path: 数据库路径，为 None 时使用 get_default_db_path()
        """
        self.db_path = db_path or get_default_db_path()

    @contextmanager
    def transaction(self):
        """
        打开连接并返回游标，退出时提交；发生异常则回滚

        Yields:
            sqlite3.Cursor
        """
        conn = sqlite3.connect(self.db_path)
        try:
            cursor = conn.cursor()
            yield cursor
            conn.commit()
        except sqlite3.Error:
            conn.rollback()
            raise
        finally:
            conn.close()
