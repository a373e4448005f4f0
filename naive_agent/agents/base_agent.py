"""Agent 引擎核心模块。

Agent = LLM + 一组它可以请求调用的 Python 函数。模型只是在响应中
“请求”调用工具，真正执行的是 Agent：它按名称在调度表中找到函数，
按声明顺序排好参数后调用，再把结果作为 tool 消息交还给模型。

消息历史只会追加，不做摘要或裁剪；Agent 实例不是线程安全的，
多个调用方共享同一个实例时需要自行串行化 request 调用。
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional
from uuid import uuid4
import logging
import time

from naive_agent.domain.exceptions import BusinessError, ChatRequestError, ValidationError
from naive_agent.domain.models import ChatMessage, ChatRequest, ChatResult
from naive_agent.infrastructure.logging.logger import logger
from naive_agent.providers.base import ProviderClient
from naive_agent.tools.catalog import build_toolset, toolset_from_defs
from naive_agent.tools.definitions import ToolDef, ToolFunc
from naive_agent.tools.executor import ToolExecutor
from naive_agent.tools.introspect import PythonSourceExtractor, SignatureExtractor


@dataclass
class AgentConfig:
    """构造 Agent 所需的工具配置。

    - system_prompt: 系统提示词，为空时使用工具源码的模块文档字符串。
      提供 tool_defs 时没有模块文档字符串可用，此时必须非空。
    - tool_source: 定义工具函数的 Python 模块源码。每个导出函数的文档字符串
      都会成为模型看到的工具描述，因此要写清楚参数与返回值。
    - tools: snake_case 工具名 -> 函数。函数必须返回 (str, Optional[Exception])。
    - tool_defs: 预先构造好的工具定义；提供时不再解析 tool_source。
    """

    system_prompt: str
    tool_source: str
    tools: Mapping[str, ToolFunc]
    tool_defs: Optional[List[ToolDef]] = None
    temperature: Optional[float] = None
    extractor: SignatureExtractor = field(default_factory=PythonSourceExtractor)


class Agent:
    def __init__(self, provider_client: ProviderClient, model: str, config: AgentConfig):
        """创建 Agent，并一次性构建工具目录与调度表。

        Raises:
            ToolSourceError: 工具源码无法解析、缺少模块文档字符串，
                或 tools 中有函数没有在源码中找到（missing tools）。
            ValidationError: 提供了 tool_defs 但 system_prompt 为空。
        """

        self._provider_client = provider_client
        system_prompt = config.system_prompt
        if config.tool_defs is not None:
            if not system_prompt:
                raise ValidationError(
                    code="MISSING_SYSTEM_PROMPT",
                    message="system_prompt is required when tool_defs are given",
                )
            toolset = toolset_from_defs(config.tool_defs, config.tools)
        else:
            module = config.extractor.extract(config.tool_source, names=set(config.tools))
            toolset = build_toolset(module, config.tools)
            system_prompt = system_prompt or module.doc

        self._tool_executor = ToolExecutor(toolset.dispatch)
        self._request = ChatRequest(
            model=model,
            messages=[ChatMessage(role="system", content=system_prompt)],
            tools=toolset.tools,
            temperature=config.temperature,
        )
        logger.info(
            "Agent initialized",
            extra={"extra": {
                "provider": provider_client.name,
                "model": model,
                "tools": [t.name for t in toolset.tools],
            }},
        )

    @property
    def model(self) -> str:
        return self._request.model

    @property
    def messages(self) -> List[ChatMessage]:
        return list(self._request.messages)

    @property
    def tools(self) -> List[ToolDef]:
        return list(self._request.tools or [])

    def request(self, message: str) -> str:
        """让 Agent 完成一项任务，返回模型的最终回答。

        只有模型认为有必要时才会调用工具；例如无副作用就能回答的问题，
        通常不会触发工具调用。Agent 是有状态的，后续请求可以引用之前的对话。

        Raises:
            ChatRequestError: 调用模型端点失败。已经追加到历史中的消息会保留。
        """

        start_time = time.time()
        log_ctx: Dict[str, Any] = {
            "trace_id": f"tr-{uuid4().hex}",
            "provider": self._provider_client.name,
            "model": self._request.model,
        }
        self._request.messages.append(ChatMessage(role="user", content=message))

        answer = self._chat(log_ctx, code="CHAT_FAILED", stage="failed to get chat response")

        # 模型一次只请求一个工具调用；0 个表示最终回答，2 个以上同样按最终回答处理
        tool_rounds = 0
        while answer.tool_calls and len(answer.tool_calls) == 1:
            tool_call = answer.tool_calls[0]
            tool_rounds += 1
            self._log(
                logging.INFO,
                "Tool call received",
                log_ctx,
                round=tool_rounds,
                tool_name=tool_call.name,
                tool_args=tool_call.arguments,
            )

            # 工具失败时模型仍可能自行补救，所以错误被编码进结果文本而不是抛出
            result = self._tool_executor.execute(tool_call)
            self._log(
                logging.INFO,
                "Tool execution finished",
                log_ctx,
                tool_name=tool_call.name,
                result_preview=result.content[:200],
            )

            self._request.messages.append(answer)
            self._request.messages.append(
                ChatMessage(role="tool", content=result.content, tool_call_id=tool_call.id or None)
            )
            answer = self._chat(
                log_ctx,
                code="CHAT_FAILED_AFTER_TOOL",
                stage="failed to get chat response after tool call",
            )

        if answer.tool_calls:
            self._log(
                logging.WARNING,
                "Multiple tool calls treated as final answer",
                log_ctx,
                call_count=len(answer.tool_calls),
                tool_names=[c.name for c in answer.tool_calls],
            )

        self._request.messages.append(answer)
        self._log(
            logging.INFO,
            "Completed request",
            log_ctx,
            tool_rounds=tool_rounds,
            elapsed_seconds=round(time.time() - start_time, 2),
        )
        return answer.content

    def _chat(self, log_ctx: Dict[str, Any], code: str, stage: str) -> ChatMessage:
        self._log(
            logging.INFO,
            "Calling provider",
            log_ctx,
            message_count=len(self._request.messages),
        )
        try:
            result: ChatResult = self._provider_client.chat(self._request)
        except BusinessError as e:
            self._log(logging.ERROR, "Provider call failed", log_ctx, code=e.code, error=e.message)
            raise ChatRequestError(
                code=code,
                message=f"{stage}: {e.message}",
                http_status=e.http_status,
                provider=self._provider_client.name,
            ) from e
        if result.usage:
            self._log(
                logging.INFO,
                "Token usage",
                log_ctx,
                prompt_tokens=result.usage.prompt_tokens,
                completion_tokens=result.usage.completion_tokens,
                total_tokens=result.usage.total_tokens,
            )
        return result.message

    @staticmethod
    def _log(level: int, message: str, log_ctx: Dict[str, Any], **fields: Any) -> None:
        payload = dict(log_ctx)
        payload.update(fields)
        logger.log(level, message, extra={"extra": payload})
