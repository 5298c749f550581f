"""领域模型单元测试"""
import pytest
from pydantic import ValidationError

from fixwise.models import (
    DiagnosisResult,
    FaultDiagnosis,
    Feedback,
    KnowledgeEntry,
    ProcessingStatus,
    Severity,
)
from conftest import make_diagnosis, make_knowledge


class TestDiagnosisResult:
    """诊断结论测试"""

    @pytest.mark.parametrize("confidence,percent", [
        (0.88, 88),
        (0.875, 88),
        (0.5, 50),
        (0.0, 0),
        (1.0, 100),
    ])
    def test_confidence_percent(self, confidence, percent):
        """测试: 置信度百分比四舍五入"""
        result = DiagnosisResult(
            fault_issue="x", confidence=confidence, severity="Low", reasoning="r",
        )
        assert result.confidence_percent == percent

    def test_confidence_out_of_range(self):
        """测试: 置信度超出 [0, 1] 时校验失败"""
        with pytest.raises(ValidationError):
            DiagnosisResult(fault_issue="x", confidence=1.2, severity="Low", reasoning="r")

    def test_invalid_severity(self):
        """测试: 未知的严重程度校验失败"""
        with pytest.raises(ValidationError):
            DiagnosisResult(fault_issue="x", confidence=0.5, severity="Severe", reasoning="r")

    def test_estimated_repair_cost_defaults_empty(self):
        """测试: 维修费用字段默认为空字符串"""
        result = DiagnosisResult(fault_issue="x", confidence=0.5, severity="Low", reasoning="r")
        assert result.estimated_repair_cost == ""
        assert result.suggested_actions == []


class TestSeverity:
    """严重程度测试"""

    def test_rank_order(self):
        """测试: 严重程度有序"""
        assert Severity.LOW.rank < Severity.MEDIUM.rank < Severity.HIGH.rank < Severity.CRITICAL.rank


class TestFaultDiagnosis:
    """诊断记录测试"""

    def test_to_dict_uses_camel_case(self):
        """测试: 序列化使用 camelCase 并省略空字段"""
        data = make_diagnosis(tracking_number="SF1").to_dict()

        assert data["productName"] == "高压洗车器"
        assert data["sourceRegion"] == "江苏省"
        assert data["trackingNumber"] == "SF1"
        assert data["status"] == "Unprocessed"
        assert data["result"]["faultIssue"] == "密封阀磨损"
        assert data["result"]["suggestedActions"] == ["检查"]
        assert data["result"]["estimatedRepairCost"] == ""
        assert "remark" not in data
        assert "feedback" not in data

    def test_from_dict_camel_case(self):
        """测试: 从 camelCase 字典反序列化"""
        item = make_diagnosis(actual_result="滤网堵塞")
        item.feedback = Feedback(rating="Helpful", comment="好")

        restored = FaultDiagnosis.from_dict(item.to_dict())

        assert restored == item
        assert restored.feedback.rating == "Helpful"

    def test_invalid_status(self):
        """测试: 未知的处理状态校验失败"""
        data = make_diagnosis().to_dict()
        data["status"] = "Done"
        with pytest.raises(ValidationError):
            FaultDiagnosis.from_dict(data)

    def test_is_manual(self):
        """测试: 人工录入记录识别"""
        assert make_diagnosis(id="MAN-ABC123").is_manual
        assert not make_diagnosis(id="a1b2c3d4e").is_manual

    def test_default_status(self):
        """测试: 默认状态为未处理"""
        assert make_diagnosis().status == ProcessingStatus.UNPROCESSED


class TestFeedback:
    """反馈测试"""

    def test_invalid_rating(self):
        """测试: 评价只能是 Helpful / Not Helpful"""
        with pytest.raises(ValidationError):
            Feedback(rating="Great")


class TestKnowledgeEntry:
    """专家知识测试"""

    def test_same_fault(self):
        """测试: 同产品同故障类型判断"""
        a = make_knowledge(id="a")
        b = make_knowledge(id="b", location="气缸")
        c = make_knowledge(id="c", fault_type="不启动")

        assert a.same_fault(b)
        assert not a.same_fault(c)

    def test_to_dict(self):
        """测试: 序列化字段名"""
        data = make_knowledge().to_dict()
        assert data["productName"] == "车载充气泵"
        assert data["faultType"] == "充气慢"
        assert KnowledgeEntry.from_dict(data) == make_knowledge()
