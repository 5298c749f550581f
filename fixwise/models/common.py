"""共享领域模型

本模块定义售后诊断系统的领域模型：
- DiagnosisResult: 诊断结论
- FaultDiagnosis: 售后诊断记录
- KnowledgeEntry: 专家知识条目
- Feedback: 诊断反馈

JSON 字段名使用 camelCase（与持久化数据保持一致），Python 属性使用 snake_case。
"""
import math
from enum import Enum
from typing import List, Optional, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Severity(str, Enum):
    """严重程度（有序）"""
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"

    @property
    def rank(self) -> int:
        """严重程度序号，越大越严重"""
        return list(Severity).index(self)


class ProcessingStatus(str, Enum):
    """售后处理状态"""
    UNPROCESSED = "Unprocessed"
    PROCESSING = "Processing"
    PROCESSED = "Processed"


class CamelModel(BaseModel):
    """camelCase 序列化基类"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_dict(self) -> dict:
        """转换为字典（用于 JSON 序列化，省略空字段）"""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    @classmethod
    def from_dict(cls, data: dict):
        """从字典创建（用于 JSON 反序列化）"""
        return cls.model_validate(data)


class DiagnosisResult(CamelModel):
    """诊断结论"""

    fault_issue: str
    confidence: float = Field(ge=0, le=1)
    severity: Severity
    reasoning: str
    suggested_actions: List[str] = Field(default_factory=list)
    estimated_repair_cost: str = ""  # 预留字段，当前始终为空

    @property
    def confidence_percent(self) -> int:
        """置信度百分比（四舍五入）"""
        return int(math.floor(self.confidence * 100 + 0.5))


class Feedback(CamelModel):
    """诊断反馈"""

    rating: Literal["Helpful", "Not Helpful"]
    comment: Optional[str] = None


class FaultDiagnosis(CamelModel):
    """售后诊断记录"""

    id: str
    timestamp: int  # 毫秒时间戳
    product_name: str
    category: str
    description: str
    source_region: str
    remark: Optional[str] = None
    status: ProcessingStatus = ProcessingStatus.UNPROCESSED
    tracking_number: Optional[str] = None
    image_url: Optional[str] = None
    result: DiagnosisResult
    actual_result: Optional[str] = None
    feedback: Optional[Feedback] = None

    @property
    def is_manual(self) -> bool:
        """是否为人工录入记录"""
        return self.id.startswith("MAN-")


class KnowledgeEntry(CamelModel):
    """专家知识条目"""

    id: str
    product_name: str
    fault_type: str
    cause: str = ""
    location: str = ""
    solution: str = ""

    def same_fault(self, other: "KnowledgeEntry") -> bool:
        """是否为同一产品的同一故障类型"""
        return (
            self.product_name == other.product_name
            and self.fault_type == other.fault_type
        )
