"""应用状态

持有诊断历史与专家知识两个集合，执行操作员动作，并在每次修改后写回存储。
诊断编排只读取这里的快照，从不直接修改。
"""
import logging
from datetime import date, datetime, timedelta
from typing import List, Optional
from urllib.parse import quote

from fixwise.core.errors import (
    DiagnosisNotFoundError,
    KnowledgeConflictError,
    KnowledgeNotFoundError,
)
from fixwise.dao.kv_store import KVStore
from fixwise.dao.repositories import HistoryRepository, KnowledgeRepository
from fixwise.models import FaultDiagnosis, Feedback, KnowledgeEntry, ProcessingStatus

logger = logging.getLogger(__name__)

HISTORY_TIME_RANGES = ("all", "day", "week", "month", "year")

LOGISTICS_QUERY_URL = "https://www.kuaidi100.com/chaxun?nu={number}"


def logistics_url(tracking_number: str) -> str:
    """物流查询链接"""
    return LOGISTICS_QUERY_URL.format(number=quote(tracking_number.strip()))


def _trim_or_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _local_datetime(timestamp_ms: int) -> datetime:
    return datetime.fromtimestamp(timestamp_ms / 1000)


def _to_ms(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


class AppState:
    """应用状态（诊断历史 + 专家知识）"""

    def __init__(self, store: KVStore):
        """
        初始化并从存储加载两个集合

        Args:
            store: 键值存储端口
        """
        self._history_repo = HistoryRepository(store)
        self._knowledge_repo = KnowledgeRepository(store)
        self.history: List[FaultDiagnosis] = self._history_repo.load()
        self.knowledge: List[KnowledgeEntry] = self._knowledge_repo.load()

    # ===== 诊断历史 =====

    def _save_history(self) -> None:
        self._history_repo.save(self.history)

    def add_diagnosis(self, diagnosis: FaultDiagnosis) -> FaultDiagnosis:
        """新增诊断记录（插入到最前）"""
        self.history.insert(0, diagnosis)
        self._save_history()
        logger.info("新增诊断记录: %s", diagnosis.id)
        return diagnosis

    def get_diagnosis(self, diagnosis_id: str) -> FaultDiagnosis:
        """按 ID 获取诊断记录

        Raises:
            DiagnosisNotFoundError: 记录不存在
        """
        for item in self.history:
            if item.id == diagnosis_id:
                return item
        raise DiagnosisNotFoundError(diagnosis_id)

    def update_actual_result(self, diagnosis_id: str, actual_result: str) -> FaultDiagnosis:
        """录入维修后的核实结果"""
        item = self.get_diagnosis(diagnosis_id)
        item.actual_result = actual_result
        self._save_history()
        return item

    def update_tracking(self, diagnosis_id: str, tracking_number: Optional[str]) -> FaultDiagnosis:
        """更新物流单号（空白则清除）"""
        item = self.get_diagnosis(diagnosis_id)
        item.tracking_number = _trim_or_none(tracking_number)
        self._save_history()
        return item

    def update_remark(self, diagnosis_id: str, remark: Optional[str]) -> FaultDiagnosis:
        """更新备注（空白则清除）"""
        item = self.get_diagnosis(diagnosis_id)
        item.remark = _trim_or_none(remark)
        self._save_history()
        return item

    def update_status(self, diagnosis_id: str, status: ProcessingStatus) -> FaultDiagnosis:
        """更新售后处理状态"""
        item = self.get_diagnosis(diagnosis_id)
        item.status = ProcessingStatus(status)
        self._save_history()
        return item

    def set_feedback(
        self,
        diagnosis_id: str,
        rating: str,
        comment: Optional[str] = None,
    ) -> FaultDiagnosis:
        """记录诊断反馈"""
        item = self.get_diagnosis(diagnosis_id)
        item.feedback = Feedback(rating=rating, comment=_trim_or_none(comment))
        self._save_history()
        return item

    def filter_history(
        self,
        query: str = "",
        time_range: str = "all",
        selected_date: Optional[date] = None,
        now: Optional[datetime] = None,
    ) -> List[FaultDiagnosis]:
        """
        按关键词与时间范围筛选诊断历史

        Args:
            query: 关键词，匹配产品名称、故障问题、物流单号（不区分大小写）
            time_range: all/day/week/month/year
            selected_date: time_range 为 day 时的日期，默认今天
            now: 当前时间（测试注入），默认 datetime.now()

        Returns:
            符合条件的记录（保持原顺序）
        """
        if time_range not in HISTORY_TIME_RANGES:
            raise ValueError(f"不支持的时间范围: {time_range}")

        now = now or datetime.now()
        q = (query or "").lower()

        if time_range == "week":
            monday = now - timedelta(days=now.weekday())
            since = monday.replace(hour=0, minute=0, second=0, microsecond=0)
        elif time_range == "month":
            since = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
        elif time_range == "year":
            since = now.replace(month=1, day=1, hour=0, minute=0, second=0, microsecond=0)
        else:
            since = None
        day = selected_date or now.date()

        results = []
        for item in self.history:
            matches = (
                q in item.product_name.lower()
                or q in item.result.fault_issue.lower()
                or (item.tracking_number and q in item.tracking_number.lower())
            )
            if not matches:
                continue
            if time_range == "day" and _local_datetime(item.timestamp).date() != day:
                continue
            if since is not None and item.timestamp < _to_ms(since):
                continue
            results.append(item)
        return results

    # ===== 专家知识 =====

    def _save_knowledge(self) -> None:
        self._knowledge_repo.save(self.knowledge)

    def save_to_knowledge(self, entry: KnowledgeEntry) -> KnowledgeEntry:
        """
        贡献专家知识

        同一 (产品名称, 故障类型) 只保留一条：已存在时原位替换，否则插入到最前。
        """
        for index, existing in enumerate(self.knowledge):
            if existing.same_fault(entry):
                self.knowledge[index] = entry
                logger.info("替换专家知识: %s -> %s", existing.id, entry.id)
                break
        else:
            self.knowledge.insert(0, entry)
            logger.info("新增专家知识: %s", entry.id)
        self._save_knowledge()
        return entry

    def get_knowledge(self, entry_id: str) -> KnowledgeEntry:
        """按 ID 获取专家知识

        Raises:
            KnowledgeNotFoundError: 条目不存在
        """
        for entry in self.knowledge:
            if entry.id == entry_id:
                return entry
        raise KnowledgeNotFoundError(entry_id)

    def update_knowledge(self, entry: KnowledgeEntry) -> KnowledgeEntry:
        """按 ID 替换专家知识

        Raises:
            KnowledgeNotFoundError: 条目不存在
            KnowledgeConflictError: 修改后的 (产品名称, 故障类型) 与另一条目重复
        """
        existing = self.get_knowledge(entry.id)
        for other in self.knowledge:
            if other.id != entry.id and other.same_fault(entry):
                raise KnowledgeConflictError(entry.id, other.id)
        self.knowledge[self.knowledge.index(existing)] = entry
        self._save_knowledge()
        return entry

    def delete_knowledge(self, entry_id: str) -> None:
        """删除专家知识"""
        existing = self.get_knowledge(entry_id)
        self.knowledge.remove(existing)
        self._save_knowledge()
        logger.info("删除专家知识: %s", entry_id)

    def search_knowledge(self, query: str = "") -> List[KnowledgeEntry]:
        """按产品名称、故障类型、故障部位搜索专家知识（不区分大小写）"""
        q = (query or "").lower()
        return [
            e for e in self.knowledge
            if q in e.product_name.lower()
            or q in e.fault_type.lower()
            or q in e.location.lower()
        ]
