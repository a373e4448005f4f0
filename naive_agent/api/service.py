"""对外 API 服务模块。

提供简化的函数接口供上层应用调用。
"""

from typing import Optional

from naive_agent.agents.base_agent import Agent, AgentConfig
from naive_agent.config.settings import settings
from naive_agent.dev import AGENT_CONFIG
from naive_agent.infrastructure.logging.logger import logger
from naive_agent.providers import create_provider


_agent: Optional[Agent] = None


def create_agent(
    config: Optional[AgentConfig] = None,
    provider_name: Optional[str] = None,
    model: Optional[str] = None,
    base_url: Optional[str] = None,
) -> Agent:
    """按 settings 创建一个新的 Agent，默认使用 dev 工具集。"""

    if config is None:
        config = AGENT_CONFIG
    provider = create_provider(provider_name, base_url=base_url)
    return Agent(provider, model or settings.default_model, config)


def get_default_agent() -> Agent:
    """获取默认的 dev Agent 实例（单例）。"""
    global _agent
    if _agent is None:
        _agent = create_agent()
    return _agent


def run_request(user_input: str) -> str:
    """把一次请求交给默认 Agent，返回最终回答。

    Raises:
        ToolSourceError: 默认 Agent 构造失败。
        ChatRequestError: 模型端点调用失败。
    """
    agent = get_default_agent()
    reply = agent.request(user_input)
    logger.info("Request finished", extra={"extra": {"reply_chars": len(reply)}})
    return reply
