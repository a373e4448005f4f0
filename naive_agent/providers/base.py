"""Provider 抽象接口。

Agent 不直接依赖具体模型服务的 HTTP 接口，而是依赖此协议：

- 每种模型服务实现一个 ProviderClient（如 OllamaClient）。
- 负责：将 ChatRequest 转成具体 API 请求，并把响应 JSON 解析为 ChatResult。

一次 chat 调用就是一次同步的往返，超时由底层 HTTP 客户端控制，
本层不做重试。
"""

from typing import Any, Dict, List, Protocol

import httpx

from naive_agent.domain.exceptions import ApiError
from naive_agent.domain.models import ChatRequest, ChatResult
from naive_agent.tools.definitions import ToolDef


class ProviderClient(Protocol):
    """LLM Provider 客户端协议。

    实现者需要提供：
    - name: Provider 名称，用于日志。
    - chat(req): 发送完整的消息历史与工具目录，返回恰好一条助手消息。
    """

    name: str

    def chat(self, req: ChatRequest) -> ChatResult:
        ...


def serialize_tool(tool: ToolDef) -> Dict[str, Any]:
    """把内部的 ToolDef 转成 function tool 描述（Ollama 与 OpenAI 格式相同）。"""

    properties: Dict[str, Any] = {}
    required: List[str] = []
    for name, param in tool.params.items():
        properties[name] = dict(param.schema or {"type": "string"})
        if param.description:
            properties[name]["description"] = param.description
        if param.required:
            required.append(name)
    return {
        "type": "function",
        "function": {
            "name": tool.name,
            "description": tool.description,
            "parameters": {
                "type": "object",
                "properties": properties,
                "required": required,
            },
        },
    }


def read_json_object(resp: httpx.Response, provider: str) -> Dict[str, Any]:
    """解析响应体为 JSON 对象；不是合法 JSON 或不是对象时抛出 ApiError。"""

    try:
        data = resp.json()
    except ValueError as e:
        raise ApiError(
            code="INVALID_RESPONSE",
            message=f"response body is not valid JSON: {resp.text[:200]}",
            http_status=resp.status_code,
            provider=provider,
        ) from e
    if not isinstance(data, dict):
        raise ApiError(
            code="INVALID_RESPONSE",
            message=f"response body is not a JSON object: {type(data).__name__}",
            http_status=resp.status_code,
            provider=provider,
        )
    return data
