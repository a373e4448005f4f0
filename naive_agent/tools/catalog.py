"""工具目录与调度表构建。

把内省得到的函数签名转换成发给模型的 ToolDef，同时为每个工具生成
DispatchEntry，供 ToolExecutor 在运行期按名称调用。两者只在 Agent
构造时生成一次。

调用方提供的 registry 是“规范化工具名 -> 可调用对象”的映射：
- 源码中存在但不在 registry 里的函数不是工具，直接跳过；
- registry 中存在但源码中找不到的工具会导致构造失败（missing tools）。
"""

from __future__ import annotations

import inspect
import re
from typing import Dict, Iterable, Mapping

from naive_agent.domain.exceptions import ToolSourceError
from naive_agent.tools.definitions import DispatchEntry, ToolDef, ToolFunc, ToolParam, Toolset
from naive_agent.tools.introspect import FunctionSignature, ModuleSignature
from naive_agent.tools.naming import replace_whole_word, to_snake_case


# 类型注解的最外层名称 -> JSON Schema 类型
_JSON_TYPES: Dict[str, str] = {
    "str": "string",
    "int": "integer",
    "float": "number",
    "bool": "boolean",
    "list": "array",
    "List": "array",
    "Sequence": "array",
    "tuple": "array",
    "Tuple": "array",
    "dict": "object",
    "Dict": "object",
    "Mapping": "object",
}


def json_schema_type(type_hint: str) -> str:
    """把类型注解文本映射为 JSON Schema 类型，无法识别时按 string 处理。

    >>> json_schema_type("Optional[int]")
    'integer'
    """

    hint = type_hint.strip()
    optional = re.fullmatch(r"(?:typing\.)?Optional\[(.*)\]", hint)
    if optional:
        hint = optional.group(1)
    hint = hint.split("|")[0].strip()
    head = hint.split("[", 1)[0].rsplit(".", 1)[-1]
    return _JSON_TYPES.get(head, "string")


def build_tool_def(fn: FunctionSignature) -> ToolDef:
    """根据函数签名生成 ToolDef。

    参数名与函数名都转为 snake_case，文档中出现的原始名称（整词）同步替换，
    这样模型看到的描述与实际的工具名、参数名保持一致。
    """

    tool_name = to_snake_case(fn.name)
    doc = fn.doc
    params: Dict[str, ToolParam] = {}
    for p in fn.params:
        param_name = to_snake_case(p.name)
        if param_name in params:
            # 规范化后重名会让调度表的参数个数少于函数的实际参数个数
            raise ToolSourceError(
                code="DUPLICATE_PARAM",
                message=f"duplicate parameter {param_name!r} in tool {tool_name!r}",
                tool=tool_name,
                param=param_name,
            )
        doc = replace_whole_word(doc, p.name, param_name)
        params[param_name] = ToolParam(
            name=param_name,
            description=param_name,
            required=True,
            schema={"type": json_schema_type(p.type_hint)},
            declared_type=p.type_hint,
        )
    doc = replace_whole_word(doc, fn.name, tool_name)
    return ToolDef(name=tool_name, description=doc, params=params)


def build_toolset(module: ModuleSignature, registry: Mapping[str, ToolFunc]) -> Toolset:
    """由模块签名和 registry 构建 Toolset（工具目录 + 调度表）。"""

    defs: Dict[str, ToolDef] = {}
    for fn in module.functions:
        if to_snake_case(fn.name) not in registry:
            continue
        tool_def = build_tool_def(fn)
        # 同名函数以最后一次定义为准，与 Python 的名称绑定一致
        defs.pop(tool_def.name, None)
        defs[tool_def.name] = tool_def
    return _assemble(defs.values(), registry)


def toolset_from_defs(tool_defs: Iterable[ToolDef], registry: Mapping[str, ToolFunc]) -> Toolset:
    """使用预先构造好的 ToolDef 构建 Toolset，不经过源码内省。"""

    defs: Dict[str, ToolDef] = {}
    for tool_def in tool_defs:
        if tool_def.name not in registry:
            continue
        # 重复的定义只保留最后一个，调度表与工具目录一一对应
        defs.pop(tool_def.name, None)
        defs[tool_def.name] = tool_def
    return _assemble(defs.values(), registry)


def _assemble(defs: Iterable[ToolDef], registry: Mapping[str, ToolFunc]) -> Toolset:
    toolset = Toolset()
    for tool_def in defs:
        toolset.tools.append(tool_def)
        toolset.dispatch[tool_def.name] = DispatchEntry(
            name=tool_def.name,
            func=registry[tool_def.name],
            param_names=tuple(tool_def.params),
        )
        _check_arity(toolset.dispatch[tool_def.name])

    if len(toolset.tools) != len(registry):
        missing = sorted(set(registry) - set(toolset.dispatch))
        raise ToolSourceError(
            code="MISSING_TOOLS",
            message="missing tools",
            missing=missing,
        )
    return toolset


def _check_arity(entry: DispatchEntry) -> None:
    """确认注册的可调用对象能按声明的参数个数以位置参数调用。"""

    try:
        signature = inspect.signature(entry.func)
    except (TypeError, ValueError):
        # 部分内置函数没有可读取的签名，只能在调用时暴露问题
        return
    try:
        signature.bind(*entry.param_names)
    except TypeError as e:
        raise ToolSourceError(
            code="ARITY_MISMATCH",
            message=f"tool {entry.name!r} does not accept {len(entry.param_names)} positional arguments: {e}",
            tool=entry.name,
            params=list(entry.param_names),
        ) from e
