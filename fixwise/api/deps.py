"""API 依赖

应用状态与诊断编排器为进程内单例，首次使用时创建；测试通过 dependency_overrides 替换。
"""
from functools import lru_cache

from fastapi import HTTPException

from fixwise.core.app_state import AppState
from fixwise.core.errors import (
    DiagnosisBusyError,
    DiagnosisError,
    DiagnosisInputError,
    DiagnosisNotFoundError,
    InsufficientInputError,
    KnowledgeConflictError,
    KnowledgeNotFoundError,
)
from fixwise.core.orchestrator import DiagnosisOrchestrator
from fixwise.dao.kv_store import SqliteKVStore
from fixwise.utils.config import Config, load_config


@lru_cache()
def get_config() -> Config:
    """全局配置（缓存）"""
    return load_config()


@lru_cache()
def get_app_state() -> AppState:
    """应用状态单例"""
    return AppState(SqliteKVStore(get_config().storage.db_path))


@lru_cache()
def get_orchestrator() -> DiagnosisOrchestrator:
    """诊断编排器单例"""
    return DiagnosisOrchestrator(get_config())


def to_http_exception(error: DiagnosisError) -> HTTPException:
    """将诊断异常映射为 HTTP 错误"""
    if isinstance(error, (DiagnosisNotFoundError, KnowledgeNotFoundError)):
        status_code = 404
    elif isinstance(error, (DiagnosisBusyError, KnowledgeConflictError)):
        status_code = 409
    elif isinstance(error, (DiagnosisInputError, InsufficientInputError)):
        status_code = 422
    else:
        status_code = 502
    return HTTPException(status_code=status_code, detail=error.message)
