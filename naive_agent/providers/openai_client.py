"""OpenAI 兼容 Provider 适配器。

适用于实现了 /chat/completions 的服务（Ollama 的 /v1、llama-server 等）：

1. 接收统一的 ChatRequest。
2. 将其转换为 OpenAI chat/completions 的请求 JSON。
3. 调用 HTTP 接口并处理网络/API 异常。
4. 将响应 JSON 解析为统一的 ChatResult / ChatMessage 结构（含工具调用）。

与 Ollama 原生接口不同，这里的工具调用带 id，arguments 是 JSON 字符串，
tool 消息需要通过 tool_call_id 关联到对应的调用。
"""

import json
from typing import Any, Dict, List

import httpx

from naive_agent.config.settings import settings
from naive_agent.domain.exceptions import ApiError, NetworkError, RateLimitError
from naive_agent.domain.models import ChatChoice, ChatMessage, ChatRequest, ChatResult, ChatUsage
from naive_agent.providers.base import read_json_object, serialize_tool
from naive_agent.providers.registry import OPENAI_CONFIG
from naive_agent.tools.definitions import ToolCall


class OpenAIClient:
    """OpenAI 兼容接口客户端实现。"""

    name = "openai"

    def __init__(self, cfg=settings, base_url=None):
        # Settings 里包含 base_url、api_key、超时等配置
        self._settings = cfg
        self._base_url = base_url

    @property
    def base_url(self) -> str:
        base = self._base_url or getattr(self._settings, "openai_base_url", None) or OPENAI_CONFIG.base_url
        return base.rstrip("/")

    def chat(self, req: ChatRequest) -> ChatResult:
        """执行一次非流式对话调用。

        步骤：
        1. 构造 HTTP 请求 payload。
        2. 发送请求并捕获网络错误/限流/服务端错误。
        3. 使用统一的解析函数构造 ChatResult。
        """

        payload = self._build_payload(req)
        headers = {"Content-Type": "application/json"}
        api_key = getattr(self._settings, "openai_api_key", None)
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
        try:
            with httpx.Client(timeout=self._settings.http_timeout, trust_env=False) as client:
                resp = client.post(
                    f"{self.base_url}{OPENAI_CONFIG.chat_path}",
                    json=payload,
                    headers=headers,
                )
        except httpx.RequestError as e:
            # 网络错误：DNS 失败、连接超时等
            raise NetworkError(code="NETWORK_ERROR", message=str(e), provider=self.name)
        if resp.status_code == 429:
            raise RateLimitError(code="RATE_LIMIT", message="OpenAI-compatible rate limit", provider=self.name)
        if resp.status_code >= 400:
            raise ApiError(code="API_ERROR", message=resp.text, http_status=resp.status_code, provider=self.name)
        data = read_json_object(resp, self.name)
        return self._parse_response(data, req)

    def _build_payload(self, req: ChatRequest) -> dict:
        """将 ChatRequest 转成 chat/completions 请求 JSON。"""

        payload: Dict[str, Any] = {
            "model": req.model,
            "messages": [self._message_to_payload(m) for m in req.messages],
        }
        if req.temperature is not None:
            payload["temperature"] = req.temperature
        if req.tools:
            payload["tools"] = [serialize_tool(tool) for tool in req.tools]
            payload["tool_choice"] = "auto"
        return payload

    def _parse_response(self, data: dict, req: ChatRequest) -> ChatResult:
        """将原始响应 JSON 解析为统一的 ChatResult。"""

        choices: list[ChatChoice] = []
        for i, ch in enumerate(data.get("choices", [])):
            if not isinstance(ch, dict):
                continue
            msg = ch.get("message") or {}
            cm = self._build_chat_message(msg)
            choices.append(ChatChoice(index=i, message=cm, finish_reason=ch.get("finish_reason")))
        if not choices:
            raise ApiError(code="EMPTY_RESPONSE", message="response has no choices", provider=self.name)
        usage_raw = data.get("usage") or {}
        usage = ChatUsage(
            prompt_tokens=usage_raw.get("prompt_tokens", 0),
            completion_tokens=usage_raw.get("completion_tokens", 0),
            total_tokens=usage_raw.get("total_tokens", 0),
        )
        return ChatResult(provider=self.name, model=req.model, choices=choices, usage=usage, raw=data)

    def _build_chat_message(self, payload: Dict[str, Any]) -> ChatMessage:
        """将单条 message 转换为 ChatMessage，并解析 tool_calls。"""

        tool_calls: List[ToolCall] = []
        for idx, call in enumerate(payload.get("tool_calls") or []):
            func = call.get("function") or {}
            tool_calls.append(
                ToolCall(
                    id=call.get("id") or f"tool_call_{idx}",
                    name=func.get("name") or "",
                    arguments=self._parse_arguments(func.get("arguments")),
                )
            )
        return ChatMessage(
            role=payload.get("role") or "assistant",
            content=payload.get("content") or "",
            tool_calls=tool_calls or None,
            tool_call_id=payload.get("tool_call_id"),
        )

    @staticmethod
    def _parse_arguments(raw: Any) -> Dict[str, Any]:
        """解析工具调用的 arguments 字段。

        arguments 通常是 JSON 字符串，这里做一层 json.loads 尝试，
        失败时保留原始字符串到 `_raw`，避免信息丢失。
        """

        if isinstance(raw, dict):
            return raw
        if isinstance(raw, str):
            try:
                parsed = json.loads(raw)
            except json.JSONDecodeError:
                return {"_raw": raw}
            return parsed if isinstance(parsed, dict) else {"_raw": raw}
        return {}

    def _message_to_payload(self, message: ChatMessage) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"role": message.role, "content": message.content}
        if message.tool_calls:
            payload["tool_calls"] = [
                {
                    "id": call.id,
                    "type": "function",
                    "function": {
                        "name": call.name,
                        "arguments": json.dumps(call.arguments, ensure_ascii=False),
                    },
                }
                for call in message.tool_calls
            ]
        if message.tool_call_id:
            payload["tool_call_id"] = message.tool_call_id
        return payload
