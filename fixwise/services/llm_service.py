"""分析服务调用

使用 OpenAI SDK 调用兼容 OpenAI API 的 LLM 服务，提交诊断请求并返回原始响应文本。
单次调用，不重试、不流式。
"""
import logging
import re
from typing import Any, Dict, Optional

from openai import AsyncOpenAI

from fixwise.core.request_builder import DiagnosisRequest
from fixwise.utils.config import Config

logger = logging.getLogger(__name__)

# 匹配 <think>...</think> 标签（支持多行）
THINK_TAG_PATTERN = re.compile(r"<think>.*?</think>\s*", re.DOTALL)


class LLMService:
    """分析服务封装"""

    def __init__(self, config: Config):
        """
        初始化分析服务

        Args:
            config: 全局配置对象
        """
        self.config = config
        self.model = config.llm.model
        self.temperature = config.llm.temperature
        self.max_tokens = config.llm.max_tokens
        self.timeout = config.llm.timeout
        self.structured_output = config.llm.structured_output

        # 异步客户端（延迟初始化）
        self._async_client: Optional[AsyncOpenAI] = None

    @property
    def async_client(self) -> AsyncOpenAI:
        """获取异步客户端（延迟初始化）"""
        if self._async_client is None:
            self._async_client = AsyncOpenAI(
                api_key=self.config.llm.api_key,
                base_url=self.config.llm.api_base,
            )
        return self._async_client

    def _response_format(self, request: DiagnosisRequest) -> Dict[str, Any]:
        """期望的响应格式"""
        if not self.structured_output:
            return {"type": "json_object"}
        return {
            "type": "json_schema",
            "json_schema": {
                "name": "fault_diagnosis",
                "schema": request.response_schema,
            },
        }

    def _clean_response(self, content: Optional[str]) -> str:
        """清理 LLM 响应

        - 去除 <think>...</think> 标签（模型的思考过程）
        - 去除首尾空白

        Args:
            content: 原始响应内容

        Returns:
            清理后的响应内容
        """
        if not content:
            return ""
        content = THINK_TAG_PATTERN.sub("", content)
        return content.strip()

    async def analyze(self, request: DiagnosisRequest) -> str:
        """提交诊断请求

        Args:
            request: 构建好的诊断请求

        Returns:
            响应文本（可能为空字符串）

        Raises:
            openai.OpenAIError: 网络、超时、鉴权等调用失败
        """
        logger.debug(
            "提交分析请求: model=%s, prompt=%d chars, image=%s",
            self.model, len(request.prompt), request.image is not None,
        )
        response = await self.async_client.chat.completions.create(
            model=self.model,
            messages=request.to_messages(),
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            timeout=self.timeout,
            response_format=self._response_format(request),
        )
        if not response.choices:
            return ""
        return self._clean_response(response.choices[0].message.content)
