"""Ollama Provider 适配器。

本模块负责：

1. 接收统一的 ChatRequest。
2. 将其转换为 Ollama 原生 /api/chat 的请求格式（非流式）。
3. 调用 HTTP 接口并处理网络/API 异常。
4. 将响应 JSON 解析为统一的 ChatResult / ChatMessage 结构（含工具调用）。

Ollama 的工具调用没有 id，arguments 直接是 JSON 对象而不是字符串。
"""

import json
from typing import Any, Dict, List

import httpx

from naive_agent.config.settings import settings
from naive_agent.domain.exceptions import ApiError, NetworkError, RateLimitError
from naive_agent.domain.models import ChatChoice, ChatMessage, ChatRequest, ChatResult, ChatUsage
from naive_agent.providers.base import read_json_object, serialize_tool
from naive_agent.providers.registry import OLLAMA_CONFIG
from naive_agent.tools.definitions import ToolCall


class OllamaClient:
    """Ollama 客户端实现。"""

    name = "ollama"

    def __init__(self, cfg=settings, base_url=None):
        self._settings = cfg
        self._base_url = base_url

    @property
    def base_url(self) -> str:
        base = self._base_url or getattr(self._settings, "ollama_base_url", None) or OLLAMA_CONFIG.base_url
        return base.rstrip("/")

    def chat(self, req: ChatRequest) -> ChatResult:
        payload = self._build_payload(req)
        try:
            with httpx.Client(timeout=self._settings.http_timeout, trust_env=False) as client:
                resp = client.post(f"{self.base_url}{OLLAMA_CONFIG.chat_path}", json=payload)
        except httpx.RequestError as e:
            raise NetworkError(code="NETWORK_ERROR", message=str(e), provider=self.name)
        if resp.status_code == 429:
            raise RateLimitError(code="RATE_LIMIT", message="Ollama rate limit", provider=self.name)
        if resp.status_code >= 400:
            raise ApiError(code="API_ERROR", message=resp.text, http_status=resp.status_code, provider=self.name)
        data = read_json_object(resp, self.name)
        return self._parse_response(data, req)

    def _build_payload(self, req: ChatRequest) -> dict:
        payload: Dict[str, Any] = {
            "model": req.model,
            "messages": [self._message_to_payload(m) for m in req.messages],
            "stream": False,
        }
        if req.tools:
            payload["tools"] = [serialize_tool(tool) for tool in req.tools]
        if req.temperature is not None:
            payload["options"] = {"temperature": req.temperature}
        return payload

    def _parse_response(self, data: dict, req: ChatRequest) -> ChatResult:
        msg = data.get("message")
        if not isinstance(msg, dict):
            raise ApiError(code="EMPTY_RESPONSE", message="Ollama response has no message", provider=self.name)
        prompt_tokens = data.get("prompt_eval_count") or 0
        completion_tokens = data.get("eval_count") or 0
        usage = ChatUsage(
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            total_tokens=prompt_tokens + completion_tokens,
        )
        choice = ChatChoice(index=0, message=self._build_chat_message(msg), finish_reason=data.get("done_reason"))
        return ChatResult(provider=self.name, model=req.model, choices=[choice], usage=usage, raw=data)

    def _build_chat_message(self, payload: Dict[str, Any]) -> ChatMessage:
        tool_calls: List[ToolCall] = []
        for call in payload.get("tool_calls") or []:
            func = call.get("function") or {}
            arguments = func.get("arguments")
            if isinstance(arguments, str):
                # 部分模型会把 arguments 写成 JSON 字符串
                try:
                    arguments = json.loads(arguments)
                except json.JSONDecodeError:
                    arguments = {"_raw": arguments}
            tool_calls.append(
                ToolCall(
                    id=call.get("id") or "",
                    name=func.get("name") or "",
                    arguments=arguments if isinstance(arguments, dict) else {},
                )
            )
        return ChatMessage(
            role=payload.get("role") or "assistant",
            content=payload.get("content") or "",
            tool_calls=tool_calls or None,
        )

    @staticmethod
    def _message_to_payload(message: ChatMessage) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"role": message.role, "content": message.content}
        if message.tool_calls:
            payload["tool_calls"] = [
                {"function": {"name": call.name, "arguments": call.arguments}}
                for call in message.tool_calls
            ]
        return payload
