"""诊断 API 接口

AI 诊断、人工录入、诊断历史查询与售后跟踪。
"""
import logging
from datetime import date
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException

from fixwise.api.deps import get_app_state, get_orchestrator, to_http_exception
from fixwise.core.app_state import AppState, logistics_url
from fixwise.core.errors import DiagnosisError
from fixwise.core.orchestrator import DiagnosisOrchestrator, create_manual_diagnosis
from fixwise.models import CamelModel, ProcessingStatus

logger = logging.getLogger(__name__)

router = APIRouter()


class DiagnoseRequest(CamelModel):
    """AI 诊断请求"""

    product_name: str
    category: str
    description: str
    source_region: str = ""
    image: Optional[str] = None  # data URL 或 base64
    remark: Optional[str] = None


class ManualEntryRequest(CamelModel):
    """人工录入请求"""

    product_name: str
    category: str
    description: str
    source_region: str = ""
    issue: Optional[str] = None
    solution: Optional[str] = None
    tracking_number: Optional[str] = None
    remark: Optional[str] = None
    image: Optional[str] = None


class DiagnosisUpdateRequest(CamelModel):
    """售后跟踪更新（仅更新提供的字段）"""

    status: Optional[ProcessingStatus] = None
    remark: Optional[str] = None
    tracking_number: Optional[str] = None
    actual_result: Optional[str] = None


class FeedbackRequest(CamelModel):
    """诊断反馈"""

    rating: Literal["Helpful", "Not Helpful"]
    comment: Optional[str] = None


@router.post("/diagnoses")
async def create_diagnosis(
    request: DiagnoseRequest,
    state: AppState = Depends(get_app_state),
    orchestrator: DiagnosisOrchestrator = Depends(get_orchestrator),
):
    """
    AI 诊断

    分析失败时不会创建记录，返回的 detail 可直接展示给操作员。
    """
    try:
        diagnosis = await orchestrator.analyze(
            request.product_name,
            request.category,
            request.description,
            request.source_region,
            history=list(state.history),
            knowledge=list(state.knowledge),
            image=request.image,
            remark=request.remark,
        )
    except DiagnosisError as e:
        logger.warning("诊断请求失败: %s", e.message)
        raise to_http_exception(e)

    state.add_diagnosis(diagnosis)
    return diagnosis.to_dict()


@router.post("/diagnoses/manual")
async def create_manual_entry(
    request: ManualEntryRequest,
    state: AppState = Depends(get_app_state),
):
    """人工录入"""
    try:
        diagnosis = create_manual_diagnosis(
            request.product_name,
            request.category,
            request.description,
            request.source_region,
            issue=request.issue,
            solution=request.solution,
            tracking_number=request.tracking_number,
            remark=request.remark,
            image=request.image,
        )
    except DiagnosisError as e:
        raise to_http_exception(e)

    state.add_diagnosis(diagnosis)
    return diagnosis.to_dict()


@router.get("/diagnoses")
async def list_diagnoses(
    query: str = "",
    time_range: Literal["all", "day", "week", "month", "year"] = "all",
    selected_date: Optional[date] = None,
    state: AppState = Depends(get_app_state),
) -> List[dict]:
    """诊断历史（最新在前）"""
    items = state.filter_history(query, time_range, selected_date)
    return [item.to_dict() for item in items]


@router.get("/diagnoses/{diagnosis_id}")
async def get_diagnosis(diagnosis_id: str, state: AppState = Depends(get_app_state)):
    """诊断详情"""
    try:
        item = state.get_diagnosis(diagnosis_id)
    except DiagnosisError as e:
        raise to_http_exception(e)

    data = item.to_dict()
    data["confidencePercent"] = item.result.confidence_percent
    if item.tracking_number:
        data["logisticsUrl"] = logistics_url(item.tracking_number)
    return data


@router.patch("/diagnoses/{diagnosis_id}")
async def update_diagnosis(
    diagnosis_id: str,
    request: DiagnosisUpdateRequest,
    state: AppState = Depends(get_app_state),
):
    """更新售后状态、备注、物流单号或核实结果"""
    fields = request.model_fields_set
    if not fields:
        raise HTTPException(status_code=400, detail="没有需要更新的字段")

    try:
        item = state.get_diagnosis(diagnosis_id)
        if "status" in fields and request.status is not None:
            item = state.update_status(diagnosis_id, request.status)
        if "remark" in fields:
            item = state.update_remark(diagnosis_id, request.remark)
        if "tracking_number" in fields:
            item = state.update_tracking(diagnosis_id, request.tracking_number)
        if "actual_result" in fields and request.actual_result is not None:
            item = state.update_actual_result(diagnosis_id, request.actual_result)
    except DiagnosisError as e:
        raise to_http_exception(e)

    return item.to_dict()


@router.post("/diagnoses/{diagnosis_id}/feedback")
async def submit_feedback(
    diagnosis_id: str,
    request: FeedbackRequest,
    state: AppState = Depends(get_app_state),
):
    """评价诊断结果"""
    try:
        item = state.set_feedback(diagnosis_id, request.rating, request.comment)
    except DiagnosisError as e:
        raise to_http_exception(e)
    return item.to_dict()
