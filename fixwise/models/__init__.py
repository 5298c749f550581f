"""数据模型模块"""
from fixwise.models.common import (
    CamelModel,
    Severity,
    ProcessingStatus,
    DiagnosisResult,
    Feedback,
    FaultDiagnosis,
    KnowledgeEntry,
)

__all__ = [
    "CamelModel",
    "Severity",
    "ProcessingStatus",
    "DiagnosisResult",
    "Feedback",
    "FaultDiagnosis",
    "KnowledgeEntry",
]
