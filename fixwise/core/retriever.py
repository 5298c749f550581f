"""上下文检索

从历史诊断记录和专家知识库中挑选与当前报修相关的条目，作为分析请求的参考资料。
启发式过滤（相等/子串匹配），不做打分排序，保持源列表顺序。
"""
from typing import Dict, List, Sequence

from pydantic import BaseModel, Field

from fixwise.models import FaultDiagnosis, KnowledgeEntry

# 每类上下文的最大条数（固定截断）
MAX_CONTEXT_ITEMS = 3

UNVERIFIED = "未核实"


class RetrievedContext(BaseModel):
    """检索到的参考上下文"""

    history: List[Dict[str, str]] = Field(default_factory=list)  # [{"issue": ..., "actual": ...}]
    knowledge: List[KnowledgeEntry] = Field(default_factory=list)

    def history_payload(self) -> List[Dict[str, str]]:
        """参考历史（用于 JSON 序列化）"""
        return list(self.history)

    def knowledge_payload(self) -> List[dict]:
        """参考专家知识（用于 JSON 序列化）"""
        return [entry.to_dict() for entry in self.knowledge]


def _relevant_history(
    product_name: str,
    category: str,
    history: Sequence[FaultDiagnosis],
) -> List[Dict[str, str]]:
    """同产品或同品类的历史记录"""
    matched = [
        h for h in history
        if h.product_name == product_name or h.category == category
    ]
    return [
        {"issue": h.description, "actual": h.actual_result or UNVERIFIED}
        for h in matched[:MAX_CONTEXT_ITEMS]
    ]


def _relevant_knowledge(
    product_name: str,
    description: str,
    knowledge: Sequence[KnowledgeEntry],
) -> List[KnowledgeEntry]:
    """产品名称包含当前产品，或故障部位出现在故障描述中的专家知识"""
    matched = [
        k for k in knowledge
        if product_name in k.product_name
        or (k.location and k.location in description)
    ]
    return matched[:MAX_CONTEXT_ITEMS]


def retrieve_context(
    product_name: str,
    category: str,
    description: str,
    history: Sequence[FaultDiagnosis],
    knowledge: Sequence[KnowledgeEntry],
) -> RetrievedContext:
    """
    检索参考上下文

    Args:
        product_name: 产品名称
        category: 产品品类
        description: 故障描述
        history: 全部历史记录（最新在前），只读
        knowledge: 全部专家知识，只读

    Returns:
        RetrievedContext，history/knowledge 各不超过 MAX_CONTEXT_ITEMS 条
    """
    return RetrievedContext(
        history=_relevant_history(product_name, category, history),
        knowledge=_relevant_knowledge(product_name, description, knowledge),
    )
