from typing import Any, Dict, List, Mapping

from naive_agent.infrastructure.logging.logger import logger
from .definitions import DispatchEntry, ToolCall, ToolResult


class ToolExecutor:
    """按调度表执行模型发起的工具调用。

    execute 永远返回文本：未注册的工具、缺失参数、工具自身报错都会被
    渲染成字符串交还给模型，由模型决定如何补救（例如修正参数后重试）。
    """

    def __init__(self, dispatch: Mapping[str, DispatchEntry]):
        self._dispatch: Dict[str, DispatchEntry] = dict(dispatch)

    def execute(self, call: ToolCall) -> ToolResult:
        return ToolResult(call_id=call.id, content=self.invoke(call))

    def invoke(self, call: ToolCall) -> str:
        entry = self._dispatch.get(call.name)
        if entry is None:
            return f"{call.name} is not a registered tool"

        args: List[Any] = []
        for param_name in entry.param_names:
            if param_name not in call.arguments:
                return f"Missing parameter: {param_name}"
            args.append(call.arguments[param_name])

        try:
            outcome = entry.invoke(args)
        except Exception as exc:
            logger.warning("Tool raised", extra={"extra": {"tool_name": call.name, "error": repr(exc)}})
            outcome = ("", exc)

        if not isinstance(outcome, tuple) or len(outcome) != 2:
            return "unexpected number of results"

        result, err = outcome
        text = "" if result is None else str(result)
        if err is not None:
            return f"{text}\n\nError:\n{err}"
        return text
