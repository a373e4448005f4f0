"""Naive Agent 顶层包。

一个最小化的 LLM Agent：从工具函数的源码与文档字符串生成工具目录，
在对话循环中按模型的请求调用工具，并把结果交还给模型，
直到模型给出最终回答。
"""

from naive_agent.agents.base_agent import Agent, AgentConfig

__all__ = ["Agent", "AgentConfig"]
