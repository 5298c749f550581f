"""诊断核心

核心组件：
- normalize_to_province: 地域标准化
- retrieve_context: 上下文检索
- build_diagnosis_request: 诊断请求构建
- parse_diagnosis_response: 诊断响应校验
- DiagnosisOrchestrator: 诊断编排
- AppState: 应用状态
"""

from fixwise.core.region import normalize_to_province, UNKNOWN_REGION
from fixwise.core.retriever import retrieve_context, RetrievedContext, MAX_CONTEXT_ITEMS
from fixwise.core.request_builder import (
    build_diagnosis_request,
    DiagnosisRequest,
    ImagePart,
)
from fixwise.core.response_validator import parse_diagnosis_response
from fixwise.core.orchestrator import (
    DiagnosisOrchestrator,
    OrchestratorState,
    create_manual_diagnosis,
)
from fixwise.core.app_state import AppState

__all__ = [
    "normalize_to_province",
    "UNKNOWN_REGION",
    "retrieve_context",
    "RetrievedContext",
    "MAX_CONTEXT_ITEMS",
    "build_diagnosis_request",
    "DiagnosisRequest",
    "ImagePart",
    "parse_diagnosis_response",
    "DiagnosisOrchestrator",
    "OrchestratorState",
    "create_manual_diagnosis",
    "AppState",
]
