"""诊断历史与专家知识的持久化

两个集合以 JSON 文本整体保存在键值存储的固定键下，首次使用时写入初始数据。
"""
import json
import logging
import time
from typing import List, Optional

from fixwise.dao.kv_store import KVStore
from fixwise.models import (
    DiagnosisResult,
    FaultDiagnosis,
    Feedback,
    KnowledgeEntry,
    ProcessingStatus,
    Severity,
)

logger = logging.getLogger(__name__)

HISTORY_KEY = "fixwise_history"
KNOWLEDGE_KEY = "fixwise_knowledge"

_DAY_MS = 86400000


def initial_knowledge() -> List[KnowledgeEntry]:
    """初始专家知识"""
    return [
        KnowledgeEntry(
            id="kb-1",
            product_name="手持无线吸尘器",
            fault_type="吸力明显减弱",
            cause="滤网堵塞或电机进风口阻塞",
            location="HEPA 滤网组件",
            solution="清洗或更换 HEPA 滤网，检查吸嘴是否有异物堵塞。",
        ),
        KnowledgeEntry(
            id="kb-2",
            product_name="车载充气泵",
            fault_type="充气缓慢且噪音大",
            cause="气缸密封圈磨损",
            location="内部压缩气缸",
            solution="检查润滑油，必要时更换压缩组件。",
        ),
    ]


def initial_history() -> List[FaultDiagnosis]:
    """初始诊断历史（示例案例）"""
    return [
        FaultDiagnosis(
            id="csa-001",
            timestamp=int(time.time() * 1000) - _DAY_MS * 2,
            product_name="高压洗车器",
            category="洗车器",
            source_region="江苏省",
            remark="客户反馈在野外露营时使用，环境沙尘较大。",
            description="开机后水压非常小，伴随异常抖动。",
            status=ProcessingStatus.PROCESSED,
            tracking_number="SF1234567890",
            result=DiagnosisResult(
                fault_issue="压力泵密封阀磨损导致水压泄露",
                confidence=0.88,
                severity=Severity.MEDIUM,
                reasoning="江苏省近期湿度较高，且客户提及沙尘环境，可能导致密封件被细微颗粒磨损或因潮湿产生水垢堵塞阀口。",
                suggested_actions=[
                    "检查进水过滤网是否堵塞。",
                    "检查进水管接口是否漏气。",
                    "清理压力泵出口阀门。",
                ],
                estimated_repair_cost="",
            ),
            actual_result="进水滤网严重堵塞",
            feedback=Feedback(rating="Helpful", comment="清理了滤网后恢复了。"),
        ),
    ]


def _load_json_list(store: KVStore, key: str) -> Optional[list]:
    raw = store.get(key)
    if raw is None:
        return None
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValueError(f"存储数据损坏: {key}") from e
    if not isinstance(data, list):
        raise ValueError(f"存储数据格式错误: {key} 应为 JSON 数组")
    return data


def _dump_json_list(store: KVStore, key: str, items: list) -> None:
    store.set(key, json.dumps([item.to_dict() for item in items], ensure_ascii=False))


class HistoryRepository:
    """诊断历史仓库（最新在前）"""

    def __init__(self, store: KVStore):
        self.store = store

    def load(self) -> List[FaultDiagnosis]:
        """读取诊断历史，未保存过时返回初始数据"""
        data = _load_json_list(self.store, HISTORY_KEY)
        if data is None:
            logger.info("未找到诊断历史，使用初始数据")
            return initial_history()
        return [FaultDiagnosis.from_dict(item) for item in data]

    def save(self, history: List[FaultDiagnosis]) -> None:
        """保存诊断历史"""
        _dump_json_list(self.store, HISTORY_KEY, history)


class KnowledgeRepository:
    """专家知识仓库"""

    def __init__(self, store: KVStore):
        self.store = store

    def load(self) -> List[KnowledgeEntry]:
        """读取专家知识，未保存过时返回初始数据"""
        data = _load_json_list(self.store, KNOWLEDGE_KEY)
        if data is None:
            logger.info("未找到专家知识，使用初始数据")
            return initial_knowledge()
        return [KnowledgeEntry.from_dict(item) for item in data]

    def save(self, knowledge: List[KnowledgeEntry]) -> None:
        """保存专家知识"""
        _dump_json_list(self.store, KNOWLEDGE_KEY, knowledge)
