"""单元测试共享夹具"""
import json
from pathlib import Path
import sys

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from fixwise.models import DiagnosisResult, FaultDiagnosis, KnowledgeEntry, Severity
from fixwise.utils.config import Config, LLMConfig


VALID_RESPONSE = {
    "isInformationValid": True,
    "faultIssue": "压力泵密封阀磨损导致水压泄露",
    "confidence": 0.82,
    "severity": "Medium",
    "reasoning": "沿海高湿环境下密封件老化，泵体内漏导致出水压力不足。",
    "suggestedActions": ["检查进水过滤网", "更换压力泵密封阀"],
}


class FakeTransport:
    """分析服务替身：记录请求并返回预设文本或抛出预设异常"""

    def __init__(self, text=None, error=None):
        self.text = json.dumps(VALID_RESPONSE, ensure_ascii=False) if text is None else text
        self.error = error
        self.requests = []

    async def analyze(self, request):
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.text


def make_diagnosis(
    id="d-1",
    product_name="高压洗车器",
    category="洗车器",
    description="水压小",
    timestamp=1700000000000,
    source_region="江苏省",
    fault_issue="密封阀磨损",
    actual_result=None,
    tracking_number=None,
) -> FaultDiagnosis:
    return FaultDiagnosis(
        id=id,
        timestamp=timestamp,
        product_name=product_name,
        category=category,
        description=description,
        source_region=source_region,
        tracking_number=tracking_number,
        result=DiagnosisResult(
            fault_issue=fault_issue,
            confidence=0.8,
            severity=Severity.MEDIUM,
            reasoning="测试",
            suggested_actions=["检查"],
        ),
        actual_result=actual_result,
    )


def make_knowledge(id="k-1", product_name="车载充气泵", fault_type="充气慢", location="") -> KnowledgeEntry:
    return KnowledgeEntry(
        id=id,
        product_name=product_name,
        fault_type=fault_type,
        cause="原因",
        location=location,
        solution="方案",
    )


@pytest.fixture
def config():
    return Config(llm=LLMConfig(api_base="http://test", api_key="test-key", model="test-model"))


@pytest.fixture
def transport():
    return FakeTransport()
