"""诊断编排

将地域标准化、上下文检索、请求构建、分析服务调用与响应校验组合为一次异步诊断。

状态机：IDLE -> BUILDING -> AWAITING_RESPONSE -> SUCCEEDED | FAILED

每次提交产生且仅产生一个终态结果；不重试、不退避、不可取消。
同一实例同一时刻只允许一个进行中的诊断，重叠提交立即以 DiagnosisBusyError 失败。
"""
import logging
import time
import uuid
from enum import Enum
from typing import Optional, Protocol, Sequence, Union

from fixwise.core.errors import (
    AnalysisServiceError,
    DiagnosisBusyError,
    DiagnosisError,
    DiagnosisInputError,
)
from fixwise.core.region import normalize_to_province
from fixwise.core.request_builder import DiagnosisRequest, ImagePart, build_diagnosis_request
from fixwise.core.response_validator import parse_diagnosis_response
from fixwise.core.retriever import retrieve_context
from fixwise.models import (
    DiagnosisResult,
    FaultDiagnosis,
    KnowledgeEntry,
    ProcessingStatus,
    Severity,
)
from fixwise.utils.config import Config

logger = logging.getLogger(__name__)

MANUAL_REASONING = "此记录为人工手动录入，未经 AI 分析。"
MANUAL_DEFAULT_ISSUE = "未标注问题"
MANUAL_DEFAULT_ACTION = "按标准售后流程处理"


class OrchestratorState(str, Enum):
    """编排状态"""
    IDLE = "idle"
    BUILDING = "building"
    AWAITING_RESPONSE = "awaiting_response"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class AnalysisTransport(Protocol):
    """分析服务传输层"""

    async def analyze(self, request: DiagnosisRequest) -> str:
        ...


def _now_ms() -> int:
    return int(time.time() * 1000)


def _clean_optional(value: Optional[str]) -> Optional[str]:
    """去除首尾空白，空字符串视为 None"""
    if value is None:
        return None
    value = value.strip()
    return value or None


class DiagnosisOrchestrator:
    """诊断编排器

    Attributes:
        state: 最近一次诊断所处的状态
    """

    def __init__(self, config: Config, analysis_service: Optional[AnalysisTransport] = None):
        """
        初始化编排器

        Args:
            config: 全局配置对象（显式传入，不读取进程级环境）
            analysis_service: 分析服务传输层，默认使用 LLMService
        """
        self.config = config
        if analysis_service is None:
            from fixwise.services.llm_service import LLMService
            analysis_service = LLMService(config)
        self.analysis_service = analysis_service
        self.state = OrchestratorState.IDLE
        self._in_flight = False

    @property
    def busy(self) -> bool:
        """是否有进行中的诊断"""
        return self._in_flight

    def _transition(self, state: OrchestratorState) -> None:
        logger.debug("诊断状态: %s -> %s", self.state.value, state.value)
        self.state = state

    async def analyze(
        self,
        product_name: str,
        category: str,
        description: str,
        source_region: str,
        history: Sequence[FaultDiagnosis] = (),
        knowledge: Sequence[KnowledgeEntry] = (),
        image: Optional[Union[str, ImagePart]] = None,
        remark: Optional[str] = None,
    ) -> FaultDiagnosis:
        """
        执行一次 AI 诊断

        Args:
            product_name: 产品名称（必填）
            category: 产品品类
            description: 故障描述（必填）
            source_region: 地域（自由文本）
            history: 历史记录快照（只读）
            knowledge: 专家知识快照（只读）
            image: 可选图片（data URL、裸 base64 或 ImagePart）
            remark: 可选备注

        Returns:
            新建的 FaultDiagnosis，由调用方负责保存

        Raises:
            DiagnosisError: 任一环节失败，message 可直接展示
        """
        if self._in_flight:
            raise DiagnosisBusyError()

        # 新的提交从 IDLE 开始，不沿用上一次的终态
        self._transition(OrchestratorState.IDLE)
        if not (product_name or "").strip() or not (description or "").strip():
            raise DiagnosisInputError("请填写产品名称和故障描述。")

        self._in_flight = True
        try:
            self._transition(OrchestratorState.BUILDING)
            region = normalize_to_province(source_region)
            context = retrieve_context(product_name, category, description, history, knowledge)
            request = build_diagnosis_request(
                product_name, category, region, description, context, image=image,
            )
            logger.info(
                "提交诊断: product=%s, category=%s, region=%s, history=%d, knowledge=%d",
                product_name, category, region, len(context.history), len(context.knowledge),
            )

            self._transition(OrchestratorState.AWAITING_RESPONSE)
            try:
                text = await self.analysis_service.analyze(request)
            except DiagnosisError:
                raise
            except Exception as e:
                logger.error("分析服务调用失败: %s: %s", type(e).__name__, e)
                raise AnalysisServiceError(f"{type(e).__name__}: {e}") from e

            result = parse_diagnosis_response(text)

        except DiagnosisError as e:
            self._transition(OrchestratorState.FAILED)
            logger.warning("诊断失败: %s (%s)", e.message, e.detail or type(e).__name__)
            raise
        finally:
            self._in_flight = False

        diagnosis = FaultDiagnosis(
            id=uuid.uuid4().hex[:9],
            timestamp=_now_ms(),
            product_name=product_name,
            category=category,
            description=description,
            source_region=region,
            remark=_clean_optional(remark),
            status=ProcessingStatus.UNPROCESSED,
            image_url=request.image.data_url if request.image else None,
            result=result,
        )
        self._transition(OrchestratorState.SUCCEEDED)
        logger.info("诊断完成: id=%s, issue=%s", diagnosis.id, result.fault_issue)
        return diagnosis


def create_manual_diagnosis(
    product_name: str,
    category: str,
    description: str,
    source_region: str,
    issue: Optional[str] = None,
    solution: Optional[str] = None,
    tracking_number: Optional[str] = None,
    remark: Optional[str] = None,
    image: Optional[str] = None,
) -> FaultDiagnosis:
    """
    创建人工录入的诊断记录（不调用分析服务）

    Args:
        product_name: 产品名称（必填）
        category: 产品品类
        description: 故障描述（必填）
        source_region: 地域（自由文本）
        issue: 人工判定的故障问题
        solution: 处理方案
        tracking_number: 物流单号
        remark: 备注
        image: 可选图片 data URL

    Returns:
        状态为 Processed 的 FaultDiagnosis
    """
    if not (product_name or "").strip() or not (description or "").strip():
        raise DiagnosisInputError("请填写产品名称和故障描述。")

    issue = _clean_optional(issue)
    solution = _clean_optional(solution)
    return FaultDiagnosis(
        id=f"MAN-{uuid.uuid4().hex[:6].upper()}",
        timestamp=_now_ms(),
        product_name=product_name,
        category=category,
        description=description,
        source_region=normalize_to_province(source_region),
        remark=_clean_optional(remark),
        status=ProcessingStatus.PROCESSED,
        tracking_number=_clean_optional(tracking_number),
        image_url=image or None,
        result=DiagnosisResult(
            fault_issue=issue or MANUAL_DEFAULT_ISSUE,
            confidence=1.0,
            severity=Severity.MEDIUM,
            reasoning=MANUAL_REASONING,
            suggested_actions=[solution] if solution else [MANUAL_DEFAULT_ACTION],
            estimated_repair_cost="",
        ),
        actual_result=issue,
    )
