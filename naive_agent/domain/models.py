"""统一的对话与结果数据模型。

本模块定义了 Agent 与不同 Provider 之间共享的标准数据结构：

- ChatMessage: 一条对话消息（system/user/assistant/tool）。
- ChatRequest: 发给模型端点的完整会话状态（模型名 + 历史消息 + 工具目录）。
- ChatResult: 从 Provider 解析后的统一响应结果。

所有 Provider 适配器（如 OllamaClient）都只依赖这些模型，
并负责在各自的 API JSON 和这些模型之间做转换。
"""

from dataclasses import dataclass, field
from typing import Literal, Optional, Any, Dict, List, TYPE_CHECKING

if TYPE_CHECKING:
    # 仅在类型检查时导入，避免运行时循环依赖
    from naive_agent.tools.definitions import ToolCall, ToolDef


Role = Literal["system", "user", "assistant", "tool"]


@dataclass
class ChatMessage:
    """一条对话消息，既可用于请求，也可用于响应。

    - role: 消息角色。
    - content: 纯文本内容。
    - meta: 附加元数据，不直接发给 Provider，主要用于日志。
    - tool_calls: role 为 "assistant" 且模型请求调用工具时的调用列表。
    - tool_call_id: role 为 "tool" 时关联的调用 id（Provider 未分配时为空）。
    """

    role: Role
    content: str
    meta: Dict[str, Any] = field(default_factory=dict)
    tool_calls: Optional[List["ToolCall"]] = None
    tool_call_id: Optional[str] = None


@dataclass
class ChatRequest:
    """一次完整的聊天请求，也就是当前的会话状态。

    Agent 持有唯一的 ChatRequest，并且只通过追加 messages 来修改它；
    tools 在构造后不再变化。
    """

    model: str
    messages: List[ChatMessage] = field(default_factory=list)
    tools: Optional[List["ToolDef"]] = None
    temperature: Optional[float] = None


@dataclass
class ChatUsage:
    """Provider 返回的 token 统计信息（统一格式）。"""

    prompt_tokens: int
    completion_tokens: int
    total_tokens: int


@dataclass
class ChatChoice:
    """单个候选回答（目前只使用 index=0 的一条）。"""

    index: int
    message: ChatMessage
    finish_reason: Optional[str] = None


@dataclass
class ChatResult:
    """一次模型端点调用的结果。

    - provider: Provider 名（如 "ollama"）。
    - model: 请求中的模型名。
    - choices: 一个或多个候选回答。
    - usage: 可选的 token 使用统计。
    - raw: 原始响应 JSON，用于调试。
    """

    provider: str
    model: str
    choices: List[ChatChoice]
    usage: Optional[ChatUsage] = None
    raw: Optional[dict] = None

    @property
    def message(self) -> ChatMessage:
        """第一条候选消息。"""

        return self.choices[0].message
