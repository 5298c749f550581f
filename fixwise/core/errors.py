"""诊断异常定义

所有诊断失败都以 DiagnosisError 子类的形式抛出，message 可直接展示给操作员。
"""
from typing import Optional

ENGINE_FAILURE_MESSAGE = "AI 分析引擎异常，请稍后重试。"
INSUFFICIENT_INPUT_MESSAGE = "录入信息无效或不足，无法生成准确的分析结果，请提供更详细的故障表现描述。"


class DiagnosisError(Exception):
    """诊断失败基类

    Attributes:
        message: 面向操作员的提示信息
        detail: 内部细节（仅用于日志）
    """

    def __init__(self, message: str, detail: Optional[str] = None):
        self.message = message
        self.detail = detail
        super().__init__(message)


class DiagnosisInputError(DiagnosisError):
    """提交内容不完整（产品名称或故障描述为空）"""


class InsufficientInputError(DiagnosisError):
    """分析服务判定录入信息不足"""


class EmptyResponseError(DiagnosisError):
    """分析服务未返回内容"""

    def __init__(self, detail: Optional[str] = "Empty response"):
        super().__init__(ENGINE_FAILURE_MESSAGE, detail)


class MalformedResponseError(DiagnosisError):
    """分析服务返回内容无法解析或缺少字段"""

    def __init__(self, detail: Optional[str] = None):
        super().__init__(ENGINE_FAILURE_MESSAGE, detail)


class AnalysisServiceError(DiagnosisError):
    """分析服务调用失败（网络、超时、鉴权等）"""

    def __init__(self, detail: Optional[str] = None):
        super().__init__(ENGINE_FAILURE_MESSAGE, detail)


class DiagnosisBusyError(DiagnosisError):
    """已有诊断请求正在进行"""

    def __init__(self):
        super().__init__("已有诊断正在进行中，请稍候再提交。")


class DiagnosisNotFoundError(DiagnosisError):
    """诊断记录不存在"""

    def __init__(self, diagnosis_id: str):
        self.diagnosis_id = diagnosis_id
        super().__init__(f"诊断记录不存在: {diagnosis_id}")


class KnowledgeNotFoundError(DiagnosisError):
    """专家知识条目不存在"""

    def __init__(self, entry_id: str):
        self.entry_id = entry_id
        super().__init__(f"专家知识不存在: {entry_id}")


class KnowledgeConflictError(DiagnosisError):
    """同一产品的同一故障类型已存在另一条专家知识"""

    def __init__(self, entry_id: str, existing_id: str):
        self.entry_id = entry_id
        self.existing_id = existing_id
        super().__init__(f"该产品的此故障类型已存在专家知识: {existing_id}")
