"""工具源码内省。

从一段 Python 模块源码中提取每个导出函数的名称、文档字符串和
按声明顺序排列的形参（含类型注解文本）。这里只做语法层面的解析，
不会 import 或执行源码。

SignatureExtractor 是可替换的接口：只要输出同样的 ModuleSignature，
也可以用其他方式（或预先构造好的 ToolDef，见 catalog.toolset_from_defs）
绕过源码解析。
"""

from __future__ import annotations

import ast
from dataclasses import dataclass, field
from typing import Collection, List, Optional, Protocol

from naive_agent.domain.exceptions import ToolSourceError
from naive_agent.tools.naming import to_snake_case


@dataclass
class ParamSignature:
    name: str
    type_hint: str = ""


@dataclass
class FunctionSignature:
    """一个导出函数的签名与文档。name 为源码中的原始标识符。"""

    name: str
    doc: str
    params: List[ParamSignature] = field(default_factory=list)


@dataclass
class ModuleSignature:
    doc: str
    functions: List[FunctionSignature] = field(default_factory=list)


class SignatureExtractor(Protocol):
    """签名提取器协议。

    names 为调用方希望暴露的规范化工具名集合；为 None 时返回全部导出函数。
    """

    def extract(self, source: str, names: Optional[Collection[str]] = None) -> ModuleSignature:
        ...


class PythonSourceExtractor:
    """基于标准库 ast 的签名提取器。

    规则：
    - 只处理模块顶层的同步函数（def），名称以下划线开头的视为未导出。
    - 模块必须带有文档字符串，否则视为工具源码不完整。
    - 函数缺少文档字符串时描述为空字符串。
    - 需要暴露的函数不能声明 *args / **kwargs / 仅限关键字参数，
      因为调用时参数一律按位置传入。
    """

    def extract(self, source: str, names: Optional[Collection[str]] = None) -> ModuleSignature:
        try:
            tree = ast.parse(source)
        except SyntaxError as exc:
            raise ToolSourceError(
                code="TOOL_SOURCE_SYNTAX",
                message=f"failed to parse tool source: {exc}",
            ) from exc

        module_doc = ast.get_docstring(tree)
        if module_doc is None:
            raise ToolSourceError(
                code="MISSING_PACKAGE_DOC",
                message="missing module docstring on tool source",
            )

        functions: List[FunctionSignature] = []
        for node in tree.body:
            if not isinstance(node, ast.FunctionDef) or node.name.startswith("_"):
                continue
            if names is not None and to_snake_case(node.name) not in names:
                continue
            functions.append(self._function_signature(node))
        return ModuleSignature(doc=module_doc, functions=functions)

    @staticmethod
    def _function_signature(node: ast.FunctionDef) -> FunctionSignature:
        args = node.args
        if args.vararg or args.kwarg or args.kwonlyargs:
            raise ToolSourceError(
                code="UNSUPPORTED_SIGNATURE",
                message=f"{node.name} must only declare positional parameters",
                function=node.name,
            )
        params = [
            ParamSignature(
                name=arg.arg,
                type_hint=ast.unparse(arg.annotation) if arg.annotation is not None else "",
            )
            for arg in [*args.posonlyargs, *args.args]
        ]
        return FunctionSignature(
            name=node.name,
            doc=ast.get_docstring(node) or "",
            params=params,
        )
