"""专家知识 API 接口"""
import uuid
from typing import List

from fastapi import APIRouter, Depends
from pydantic import Field

from fixwise.api.deps import get_app_state, to_http_exception
from fixwise.core.app_state import AppState
from fixwise.core.errors import DiagnosisError
from fixwise.models import CamelModel, KnowledgeEntry

router = APIRouter()


class KnowledgeRequest(CamelModel):
    """专家知识内容"""

    product_name: str = Field(min_length=1)
    fault_type: str = Field(min_length=1)
    cause: str = ""
    location: str = ""
    solution: str = ""


@router.get("/knowledge")
async def list_knowledge(query: str = "", state: AppState = Depends(get_app_state)) -> List[dict]:
    """搜索专家知识（产品、故障类型、部位）"""
    return [entry.to_dict() for entry in state.search_knowledge(query)]


@router.post("/knowledge")
async def contribute_knowledge(request: KnowledgeRequest, state: AppState = Depends(get_app_state)):
    """贡献专家知识，同产品同故障类型的条目会被替换"""
    entry = KnowledgeEntry(id=uuid.uuid4().hex[:9], **request.model_dump())
    return state.save_to_knowledge(entry).to_dict()


@router.put("/knowledge/{entry_id}")
async def update_knowledge(
    entry_id: str,
    request: KnowledgeRequest,
    state: AppState = Depends(get_app_state),
):
    """编辑专家知识"""
    try:
        entry = state.update_knowledge(KnowledgeEntry(id=entry_id, **request.model_dump()))
    except DiagnosisError as e:
        raise to_http_exception(e)
    return entry.to_dict()


@router.delete("/knowledge/{entry_id}")
async def delete_knowledge(entry_id: str, state: AppState = Depends(get_app_state)):
    """删除专家知识"""
    try:
        state.delete_knowledge(entry_id)
    except DiagnosisError as e:
        raise to_http_exception(e)
    return {"message": "专家知识已删除", "id": entry_id}
