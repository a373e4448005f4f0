"""工具数据结构定义。

这些 dataclass 描述了“工具调用”的 schema，既用于：
- 将可用工具目录暴露给 LLM（ToolDef / ToolParam）。
- 在 Agent 中保存和执行模型触发的工具调用（ToolCall / ToolResult）。
- 在构造期生成的调度表中保存可调用对象与参数顺序（DispatchEntry）。
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple


ToolFunc = Callable[..., Tuple[str, Optional[Exception]]]


@dataclass
class ToolParam:
    """单个工具参数的定义。

    declared_type 保存源码中的类型注解文本（未求值），
    schema 是发给模型的 JSON Schema 片段。
    """

    name: str
    description: str
    required: bool
    schema: Dict[str, Any]
    declared_type: str = ""


@dataclass
class ToolDef:
    """一个可供 LLM 调用的工具定义。params 的插入顺序即参数声明顺序。"""

    name: str
    description: str
    params: Dict[str, ToolParam]


@dataclass
class ToolCall:
    """模型发起的一次工具调用请求。"""

    id: str
    name: str
    arguments: Dict[str, Any]


@dataclass
class ToolResult:
    """工具执行结果的封装（文本形式）。"""

    call_id: str
    content: str


@dataclass(frozen=True)
class DispatchEntry:
    """调度表中的一项：可调用对象及其形参名（按声明顺序）。"""

    name: str
    func: ToolFunc
    param_names: Tuple[str, ...]

    def invoke(self, args: List[Any]) -> Tuple[str, Optional[Exception]]:
        return self.func(*args)


@dataclass
class Toolset:
    """构造期产物：工具目录 + 调度表，构造完成后只读。"""

    tools: List[ToolDef] = field(default_factory=list)
    dispatch: Dict[str, DispatchEntry] = field(default_factory=dict)
