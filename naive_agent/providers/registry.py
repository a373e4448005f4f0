"""Provider 默认配置。

每个 Provider 记录名称、默认基础 URL 与对话接口路径。实际使用的 URL
优先取 settings 中的配置，这里只提供兜底值。"""

from dataclasses import dataclass
from typing import Mapping


@dataclass
class ProviderConfig:
    """某个 Provider 的整体配置。"""

    name: str
    base_url: str
    chat_path: str


# Ollama 原生 /api/chat
OLLAMA_CONFIG = ProviderConfig(
    name="ollama",
    base_url="http://localhost:11434",
    chat_path="/api/chat",
)

# OpenAI 兼容 /chat/completions（Ollama /v1、llama-server 等）
OPENAI_CONFIG = ProviderConfig(
    name="openai",
    base_url="http://localhost:11434/v1",
    chat_path="/chat/completions",
)


PROVIDER_REGISTRY: Mapping[str, ProviderConfig] = {
    "ollama": OLLAMA_CONFIG,
    "openai": OPENAI_CONFIG,
}


def get_provider_config(name: str) -> ProviderConfig:
    """根据名称获取 ProviderConfig，名称不区分大小写。"""

    key = name.lower()
    for k, cfg in PROVIDER_REGISTRY.items():
        if k.lower() == key:
            return cfg
    raise KeyError(f"Unknown provider: {name!r}")
