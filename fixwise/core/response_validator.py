"""诊断响应校验

将分析服务返回的文本解析为 DiagnosisResult。校验是全有或全无的：
任何失败都抛出 DiagnosisError 子类，从不返回部分填充的结果。
"""
import json
import re
from typing import List, Optional

from pydantic import BaseModel, Field, ValidationError

from fixwise.core.errors import (
    INSUFFICIENT_INPUT_MESSAGE,
    EmptyResponseError,
    InsufficientInputError,
    MalformedResponseError,
)
from fixwise.models import DiagnosisResult, Severity

_CODE_FENCE_OPEN = re.compile(r"^```\w*\n?")
_CODE_FENCE_CLOSE = re.compile(r"\n?```$")


class AnalysisPayload(BaseModel):
    """分析服务返回的诊断字段"""

    fault_issue: str = Field(alias="faultIssue")
    confidence: float = Field(ge=0, le=1)
    severity: Severity
    reasoning: str
    suggested_actions: List[str] = Field(alias="suggestedActions")


def _strip_code_fence(text: str) -> str:
    """去除 markdown 代码块包裹"""
    text = text.strip()
    if text.startswith("```"):
        text = _CODE_FENCE_OPEN.sub("", text)
        text = _CODE_FENCE_CLOSE.sub("", text)
    return text.strip()


def parse_diagnosis_response(text: Optional[str]) -> DiagnosisResult:
    """
    解析并校验分析服务的响应

    Args:
        text: 分析服务返回的原始文本

    Returns:
        DiagnosisResult（estimated_repair_cost 始终为空字符串）

    Raises:
        EmptyResponseError: 未返回内容
        MalformedResponseError: 不是 JSON 对象、有效性标记不是布尔值，或缺少/非法的诊断字段
        InsufficientInputError: 分析服务判定录入信息不足
    """
    if text is None or not text.strip():
        raise EmptyResponseError()

    try:
        parsed = json.loads(_strip_code_fence(text))
    except json.JSONDecodeError as e:
        raise MalformedResponseError(f"JSON 解析失败: {e}") from e

    if not isinstance(parsed, dict):
        raise MalformedResponseError(f"响应不是 JSON 对象: {type(parsed).__name__}")

    is_valid = parsed.get("isInformationValid")
    if is_valid is not None and not isinstance(is_valid, bool):
        raise MalformedResponseError(f"isInformationValid 不是布尔值: {is_valid!r}")

    # 缺少标记视为信息不足
    if not is_valid:
        reason = parsed.get("invalidReason")
        if not isinstance(reason, str) or not reason.strip():
            reason = INSUFFICIENT_INPUT_MESSAGE
        raise InsufficientInputError(reason)

    try:
        payload = AnalysisPayload.model_validate(parsed)
    except ValidationError as e:
        raise MalformedResponseError(f"诊断字段校验失败: {e.error_count()} 个错误") from e

    return DiagnosisResult(
        fault_issue=payload.fault_issue,
        confidence=payload.confidence,
        severity=payload.severity,
        reasoning=payload.reasoning,
        suggested_actions=payload.suggested_actions,
        estimated_repair_cost="",
    )
