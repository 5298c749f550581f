"""诊断请求构建

组装发往分析服务的请求：自然语言指令、参考上下文、可选图片以及期望的响应结构。
纯函数，不进行任何网络 I/O。
"""
import base64
import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field

from fixwise.core.retriever import RetrievedContext
from fixwise.models import Severity

DEFAULT_IMAGE_MIME = "image/jpeg"

DIAGNOSIS_PROMPT_TEMPLATE = """你是一个顶级的产品失效分析工程师。请对以下产品故障进行深度分析。

产品: {product_name} ({category})
地域环境: {region}
故障现象: {description}

要求：
1. 首先判断输入信息是否有效。如果输入是乱码、与产品故障无关、或者描述过于模糊（如只写了“坏了”而没有任何现象）导致无法进行逻辑推演，请将 isInformationValid 设为 false，并在 invalidReason 中说明原因。
2. 若信息有效，结合省份地理气候特征（如高盐雾、极端低温、风沙、高湿等）给出详细的故障分析结论。结论应侧重于描述“可能出现的问题/故障性质”。
3. 分析逻辑必须包含物理失效路径的推演。
4. 仅输出 JSON 对象，不要输出其他内容。

参考历史: {history}
参考专家库: {knowledge}"""

RESPONSE_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "isInformationValid": {
            "type": "boolean",
            "description": "输入信息是否足以进行故障分析",
        },
        "invalidReason": {
            "type": "string",
            "description": "如果信息无效，说明原因",
        },
        "faultIssue": {
            "type": "string",
            "description": "可能出现的问题描述，如‘压力泵密封圈磨损导致内漏’",
        },
        "confidence": {"type": "number", "description": "置信度，0 到 1 之间"},
        "severity": {
            "type": "string",
            "enum": [s.value for s in Severity],
        },
        "reasoning": {"type": "string", "description": "包含物理失效路径的分析过程"},
        "suggestedActions": {
            "type": "array",
            "items": {"type": "string"},
        },
    },
    "required": ["isInformationValid"],
}


class ImagePart(BaseModel):
    """内联图片（base64）"""

    data: str
    mime_type: str = DEFAULT_IMAGE_MIME

    @classmethod
    def from_data_url(cls, value: str) -> "ImagePart":
        """从 data URL 或裸 base64 字符串创建

        data URL 形如 ``data:image/png;base64,xxxx``，MIME 类型取自 URL；
        裸 base64 使用默认 MIME 类型。
        """
        if value.startswith("data:") and "," in value:
            header, data = value.split(",", 1)
            mime_type = header[len("data:"):].split(";", 1)[0] or DEFAULT_IMAGE_MIME
            return cls(data=data, mime_type=mime_type)
        return cls(data=value)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "ImagePart":
        """读取本地图片文件"""
        path = Path(path)
        suffix = path.suffix.lower().lstrip(".")
        mime_type = {
            "png": "image/png",
            "gif": "image/gif",
            "webp": "image/webp",
        }.get(suffix, DEFAULT_IMAGE_MIME)
        data = base64.b64encode(path.read_bytes()).decode("ascii")
        return cls(data=data, mime_type=mime_type)

    @property
    def data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.data}"


class DiagnosisRequest(BaseModel):
    """一次分析请求的完整描述（由传输层提交）"""

    prompt: str
    image: Optional[ImagePart] = None
    response_schema: Dict[str, Any] = Field(default_factory=lambda: dict(RESPONSE_SCHEMA))

    def to_messages(self) -> List[Dict[str, Any]]:
        """转换为 OpenAI chat messages"""
        content: List[Dict[str, Any]] = [{"type": "text", "text": self.prompt}]
        if self.image is not None:
            content.append({
                "type": "image_url",
                "image_url": {"url": self.image.data_url},
            })
        return [{"role": "user", "content": content}]


def build_prompt(
    product_name: str,
    category: str,
    region: str,
    description: str,
    context: RetrievedContext,
) -> str:
    """渲染诊断指令文本"""
    return DIAGNOSIS_PROMPT_TEMPLATE.format(
        product_name=product_name,
        category=category,
        region=region,
        description=description,
        history=json.dumps(context.history_payload(), ensure_ascii=False),
        knowledge=json.dumps(context.knowledge_payload(), ensure_ascii=False),
    )


def build_diagnosis_request(
    product_name: str,
    category: str,
    region: str,
    description: str,
    context: RetrievedContext,
    image: Optional[Union[str, ImagePart]] = None,
) -> DiagnosisRequest:
    """
    构建诊断请求

    Args:
        product_name: 产品名称
        category: 产品品类
        region: 标准化后的省份
        description: 故障描述
        context: 检索到的参考上下文
        image: 可选图片（data URL、裸 base64 或 ImagePart）

    Returns:
        DiagnosisRequest
    """
    if isinstance(image, str):
        image = ImagePart.from_data_url(image) if image else None

    return DiagnosisRequest(
        prompt=build_prompt(product_name, category, region, description, context),
        image=image,
    )
