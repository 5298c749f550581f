"""诊断编排单元测试"""
import asyncio
import time
import json
from unittest.mock import AsyncMock

import pytest

from fixwise.core.errors import (
    ENGINE_FAILURE_MESSAGE,
    AnalysisServiceError,
    DiagnosisBusyError,
    DiagnosisInputError,
    InsufficientInputError,
    MalformedResponseError,
)
from fixwise.core.orchestrator import (
    MANUAL_DEFAULT_ACTION,
    MANUAL_DEFAULT_ISSUE,
    MANUAL_REASONING,
    DiagnosisOrchestrator,
    OrchestratorState,
    create_manual_diagnosis,
)
from fixwise.dao.repositories import initial_history, initial_knowledge
from fixwise.models import ProcessingStatus, Severity
from fixwise.services.llm_service import LLMService
from conftest import FakeTransport


class BlockingTransport:
    """在 release 之前一直挂起的分析服务"""

    def __init__(self, text):
        self.text = text
        self.release = asyncio.Event()

    async def analyze(self, request):
        await self.release.wait()
        return self.text


class TestAnalyze:
    """AI 诊断测试"""

    @pytest.mark.asyncio
    async def test_end_to_end(self, config, transport):
        """测试: 高压洗车器 / 江苏 完整诊断流程"""
        orchestrator = DiagnosisOrchestrator(config, transport)
        history = initial_history()
        knowledge = initial_knowledge()

        diagnosis = await orchestrator.analyze(
            "高压洗车器", "洗车器", "开机后水压非常小", "江苏",
            history=history, knowledge=knowledge,
        )

        assert diagnosis.source_region == "江苏省"
        assert diagnosis.status == ProcessingStatus.UNPROCESSED
        assert len(diagnosis.id) == 9
        assert diagnosis.timestamp > 0
        assert diagnosis.result.fault_issue == "压力泵密封阀磨损导致水压泄露"
        assert diagnosis.result.estimated_repair_cost == ""
        assert diagnosis.image_url is None
        assert orchestrator.state == OrchestratorState.SUCCEEDED
        assert not orchestrator.busy

        # 参考上下文包含同产品的已核实案例
        prompt = transport.requests[0].prompt
        assert "地域环境: 江苏省" in prompt
        assert "进水滤网严重堵塞" in prompt

        # 快照未被修改
        assert len(history) == 1
        assert len(knowledge) == 2

    @pytest.mark.asyncio
    async def test_end_to_end_empty_context(self, config, transport):
        """测试: 无参考上下文时的完整诊断流程"""
        service = AsyncMock()
        service.analyze.return_value = transport.text
        orchestrator = DiagnosisOrchestrator(config, service)
        submitted_at = int(time.time() * 1000)

        diagnosis = await orchestrator.analyze(
            "高压洗车器", "洗车器", "开机后水压非常小，伴随异常抖动。", "江苏",
        )

        assert diagnosis.source_region == "江苏省"
        assert diagnosis.timestamp >= submitted_at
        assert diagnosis.result.estimated_repair_cost == ""
        request = service.analyze.call_args.args[0]
        assert "参考历史: []" in request.prompt
        assert "参考专家库: []" in request.prompt

    @pytest.mark.asyncio
    async def test_unique_ids(self, config, transport):
        """测试: 每次诊断生成新的 ID"""
        orchestrator = DiagnosisOrchestrator(config, transport)
        first = await orchestrator.analyze("a", "b", "c", "")
        second = await orchestrator.analyze("a", "b", "c", "")
        assert first.id != second.id

    @pytest.mark.asyncio
    async def test_unknown_region(self, config, transport):
        """测试: 无法识别的地域使用兜底值"""
        orchestrator = DiagnosisOrchestrator(config, transport)
        diagnosis = await orchestrator.analyze("a", "b", "c", "火星")
        assert diagnosis.source_region == "未知地区"

    @pytest.mark.asyncio
    async def test_image_and_remark(self, config, transport):
        """测试: 图片与备注"""
        orchestrator = DiagnosisOrchestrator(config, transport)

        diagnosis = await orchestrator.analyze(
            "a", "b", "c", "", image="data:image/png;base64,AAAA", remark="  沙尘大  ",
        )

        assert diagnosis.image_url == "data:image/png;base64,AAAA"
        assert diagnosis.remark == "沙尘大"
        assert transport.requests[0].image.mime_type == "image/png"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("product,description", [("", "c"), ("a", "   ")])
    async def test_required_fields(self, config, transport, product, description):
        """测试: 产品名称和故障描述必填，不调用分析服务"""
        orchestrator = DiagnosisOrchestrator(config, transport)

        with pytest.raises(DiagnosisInputError):
            await orchestrator.analyze(product, "b", description, "")

        assert transport.requests == []
        assert orchestrator.state == OrchestratorState.IDLE

    @pytest.mark.asyncio
    async def test_transport_failure(self, config):
        """测试: 分析服务调用失败"""
        orchestrator = DiagnosisOrchestrator(config, FakeTransport(error=TimeoutError("timeout")))

        with pytest.raises(AnalysisServiceError) as exc_info:
            await orchestrator.analyze("a", "b", "c", "")

        assert exc_info.value.message == ENGINE_FAILURE_MESSAGE
        assert "TimeoutError" in exc_info.value.detail
        assert orchestrator.state == OrchestratorState.FAILED
        assert not orchestrator.busy

    @pytest.mark.asyncio
    async def test_insufficient_input(self, config):
        """测试: 信息不足"""
        text = json.dumps({"isInformationValid": False, "invalidReason": "描述过于模糊"})
        orchestrator = DiagnosisOrchestrator(config, FakeTransport(text=text))

        with pytest.raises(InsufficientInputError) as exc_info:
            await orchestrator.analyze("a", "b", "坏了", "")

        assert exc_info.value.message == "描述过于模糊"
        assert orchestrator.state == OrchestratorState.FAILED

    @pytest.mark.asyncio
    async def test_malformed_response(self, config):
        """测试: 响应无法解析"""
        orchestrator = DiagnosisOrchestrator(config, FakeTransport(text="oops"))

        with pytest.raises(MalformedResponseError):
            await orchestrator.analyze("a", "b", "c", "")

        assert orchestrator.state == OrchestratorState.FAILED

    @pytest.mark.asyncio
    async def test_recovers_after_failure(self, config):
        """测试: 失败后可再次提交"""
        transport = FakeTransport(error=RuntimeError("down"))
        orchestrator = DiagnosisOrchestrator(config, transport)

        with pytest.raises(AnalysisServiceError):
            await orchestrator.analyze("a", "b", "c", "")

        transport.error = None
        diagnosis = await orchestrator.analyze("a", "b", "c", "")
        assert diagnosis.result.severity == Severity.MEDIUM
        assert orchestrator.state == OrchestratorState.SUCCEEDED

    @pytest.mark.asyncio
    async def test_overlapping_submission_rejected(self, config, transport):
        """测试: 进行中时重复提交立即失败"""
        blocking = BlockingTransport(transport.text)
        orchestrator = DiagnosisOrchestrator(config, blocking)

        first = asyncio.create_task(orchestrator.analyze("a", "b", "c", ""))
        await asyncio.sleep(0)
        assert orchestrator.busy
        assert orchestrator.state == OrchestratorState.AWAITING_RESPONSE

        with pytest.raises(DiagnosisBusyError):
            await orchestrator.analyze("a", "b", "c", "")

        blocking.release.set()
        diagnosis = await first
        assert diagnosis.result.fault_issue
        assert not orchestrator.busy

    @pytest.mark.asyncio
    async def test_input_error_resets_previous_state(self, config, transport):
        """测试: 必填项校验失败时不保留上一次诊断的终态"""
        orchestrator = DiagnosisOrchestrator(config, transport)
        await orchestrator.analyze("a", "b", "c", "")
        assert orchestrator.state == OrchestratorState.SUCCEEDED

        with pytest.raises(DiagnosisInputError):
            await orchestrator.analyze("a", "b", "", "")

        assert orchestrator.state == OrchestratorState.IDLE
        assert len(transport.requests) == 1

    def test_default_analysis_service(self, config):
        """测试: 默认使用 LLMService"""
        orchestrator = DiagnosisOrchestrator(config)
        assert isinstance(orchestrator.analysis_service, LLMService)
        assert orchestrator.state == OrchestratorState.IDLE


class TestManualDiagnosis:
    """人工录入测试"""

    def test_manual_entry(self):
        """测试: 人工录入记录"""
        diagnosis = create_manual_diagnosis(
            "车载充气泵", "车载便携充气泵", "充气慢", "深圳",
            issue="气缸密封圈磨损", solution="更换密封圈", tracking_number=" YT001 ",
        )

        assert diagnosis.id.startswith("MAN-")
        assert len(diagnosis.id) == 10
        assert diagnosis.is_manual
        assert diagnosis.status == ProcessingStatus.PROCESSED
        assert diagnosis.source_region == "广东省"
        assert diagnosis.tracking_number == "YT001"
        assert diagnosis.result.fault_issue == "气缸密封圈磨损"
        assert diagnosis.result.confidence == 1.0
        assert diagnosis.result.severity == Severity.MEDIUM
        assert diagnosis.result.reasoning == MANUAL_REASONING
        assert diagnosis.result.suggested_actions == ["更换密封圈"]
        assert diagnosis.actual_result == "气缸密封圈磨损"

    def test_manual_defaults(self):
        """测试: 未填写问题和方案时使用默认值"""
        diagnosis = create_manual_diagnosis("a", "b", "c", "")

        assert diagnosis.result.fault_issue == MANUAL_DEFAULT_ISSUE
        assert diagnosis.result.suggested_actions == [MANUAL_DEFAULT_ACTION]
        assert diagnosis.actual_result is None
        assert diagnosis.tracking_number is None
        assert diagnosis.source_region == "未知地区"

    def test_manual_required_fields(self):
        """测试: 必填项校验"""
        with pytest.raises(DiagnosisInputError):
            create_manual_diagnosis("", "b", "c", "")
