"""配置加载模块"""
import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel


class LLMConfig(BaseModel):
    """分析服务（LLM）配置"""
    api_base: str
    api_key: str
    model: str
    temperature: float = 0.2
    max_tokens: int = 4096
    timeout: float = 60  # 秒，由 SDK 执行
    structured_output: bool = True  # False 时使用 json_object 模式


class StorageConfig(BaseModel):
    """本地存储配置"""
    db_path: Optional[str] = None  # 为空时使用默认路径（优先环境变量 DATA_DIR）


class WebConfig(BaseModel):
    """Web 服务配置"""
    host: str = "127.0.0.1"
    port: int = 8000


class Config(BaseModel):
    """全局配置"""
    llm: LLMConfig
    storage: StorageConfig = StorageConfig()
    web: WebConfig = WebConfig()


def load_config(config_path: Optional[str] = None) -> Config:
    """
    加载配置文件

    Args:
        config_path: 配置文件路径，默认按以下顺序查找：
                     1. 环境变量 CONFIG_PATH
                     2. 项目根目录的 config.yaml

    Returns:
        Config: 配置对象
    """
    if config_path is None:
        config_path = os.environ.get("CONFIG_PATH")

    if config_path is None:
        project_root = Path(__file__).parent.parent.parent
        config_path = project_root / "config.yaml"

    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(
            f"配置文件不存在: {config_path}\n"
            f"请复制 config.yaml.example 并修改为 config.yaml"
        )

    with open(config_path, "r", encoding="utf-8") as f:
        config_dict = yaml.safe_load(f) or {}

    return Config(**config_dict)
