"""LLM Provider 集成层。

该包下的模块负责：
- 定义 Provider 抽象接口 (base)。
- 维护各 Provider 的默认地址 (registry)。
- 提供具体实现 (ollama_client、openai_client)。
"""

from typing import Optional

from naive_agent.config.settings import settings
from naive_agent.providers.base import ProviderClient
from naive_agent.providers.ollama_client import OllamaClient
from naive_agent.providers.openai_client import OpenAIClient
from naive_agent.providers.registry import get_provider_config


def create_provider(name: Optional[str] = None, base_url: Optional[str] = None) -> ProviderClient:
    """根据名称创建 Provider 实例，默认取配置中的 provider。"""

    cfg = get_provider_config(name or getattr(settings, "default_provider", "ollama"))
    if cfg.name == "openai":
        return OpenAIClient(settings, base_url=base_url)
    return OllamaClient(settings, base_url=base_url)

