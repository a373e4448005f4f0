import pytest

from naive_agent.domain.exceptions import ToolSourceError
from naive_agent.tests.sample_tools import SOURCE, PatchFile, ReadFile, Shell
from naive_agent.tools.catalog import build_tool_def, build_toolset, json_schema_type, toolset_from_defs
from naive_agent.tools.definitions import ToolDef, ToolParam
from naive_agent.tools.introspect import FunctionSignature, ParamSignature, PythonSourceExtractor


def _toolset(registry):
    module = PythonSourceExtractor().extract(SOURCE, names=set(registry))
    return build_toolset(module, registry)


def test_build_toolset_single_tool():
    toolset = _toolset({"shell": Shell})

    assert len(toolset.tools) == 1
    tool = toolset.tools[0]
    assert tool.name == "shell"
    assert tool.description == (
        "shell runs a shell command.\n"
        "\n"
        "Args:\n"
        "    command: The shell command to run."
    )
    assert list(tool.params) == ["command"]
    param = tool.params["command"]
    assert param.description == "command"
    assert param.required is True
    assert param.schema == {"type": "string"}
    assert param.declared_type == "str"

    entry = toolset.dispatch["shell"]
    assert entry.func is Shell
    assert entry.param_names == ("command",)


def test_build_toolset_keeps_registry_subset_in_source_order():
    toolset = _toolset({"patch_file": PatchFile, "shell": Shell})

    assert [t.name for t in toolset.tools] == ["shell", "patch_file"]
    patch = toolset.tools[1]
    assert patch.description.startswith(
        "patch_file patches the file at the specified path by replacing before with\nafter."
    )
    assert list(patch.params) == ["path", "before", "after"]
    assert toolset.dispatch["patch_file"].param_names == ("path", "before", "after")
    assert set(toolset.dispatch) == {"shell", "patch_file"}


def test_build_toolset_missing_tools():
    def write_file(path, content):
        return "", None

    with pytest.raises(ToolSourceError) as exc_info:
        _toolset({"shell": Shell, "write_file": write_file})
    assert exc_info.value.code == "MISSING_TOOLS"
    assert exc_info.value.message == "missing tools"
    assert exc_info.value.extra["missing"] == ["write_file"]


def test_build_toolset_registry_key_must_be_canonical():
    with pytest.raises(ToolSourceError) as exc_info:
        _toolset({"Shell": Shell})
    assert exc_info.value.code == "MISSING_TOOLS"


def test_build_toolset_private_function_is_never_a_tool():
    with pytest.raises(ToolSourceError):
        _toolset({"_not_exported": lambda command: (command, None)})


def test_build_tool_def_rewrites_names_in_doc():
    fn = FunctionSignature(
        name="ReadFile",
        doc="ReadFile reads filePath, not filePathX.\nSee ReadFileAll.",
        params=[ParamSignature(name="filePath", type_hint="str"), ParamSignature(name="maxLines", type_hint="int")],
    )
    tool = build_tool_def(fn)
    assert tool.name == "read_file"
    assert tool.description == "read_file reads file_path, not filePathX.\nSee ReadFileAll."
    assert list(tool.params) == ["file_path", "max_lines"]
    assert tool.params["max_lines"].schema == {"type": "integer"}
    assert tool.params["max_lines"].declared_type == "int"


@pytest.mark.parametrize(
    "hint,expected",
    [
        ("str", "string"),
        ("int", "integer"),
        ("float", "number"),
        ("bool", "boolean"),
        ("List[str]", "array"),
        ("list[int]", "array"),
        ("typing.Dict[str, int]", "object"),
        ("Optional[int]", "integer"),
        ("int | None", "integer"),
        ("Path", "string"),
        ("", "string"),
    ],
)
def test_json_schema_type(hint, expected):
    assert json_schema_type(hint) == expected


def test_toolset_from_defs():
    tool = ToolDef(
        name="read_file",
        description="read a file",
        params={"path": ToolParam(name="path", description="path", required=True, schema={"type": "string"})},
    )
    other = ToolDef(name="unused", description="", params={})

    toolset = toolset_from_defs([tool, other], {"read_file": ReadFile})
    assert toolset.tools == [tool]
    assert toolset.dispatch["read_file"].param_names == ("path",)

    with pytest.raises(ToolSourceError):
        toolset_from_defs([other], {"read_file": ReadFile})


def test_build_tool_def_duplicate_param_after_canonicalization():
    fn = FunctionSignature(
        name="copy",
        doc="copy copies fooBar to foo_bar.",
        params=[ParamSignature("fooBar", "str"), ParamSignature("foo_bar", "str")],
    )
    with pytest.raises(ToolSourceError) as exc_info:
        build_tool_def(fn)
    assert exc_info.value.code == "DUPLICATE_PARAM"
    assert exc_info.value.extra["param"] == "foo_bar"


def test_build_toolset_rejects_duplicate_params_from_source():
    source = '"""Tools."""\n\n\ndef copy(fooBar: str, foo_bar: str):\n    """copy copies."""\n    return "", None\n'
    module = PythonSourceExtractor().extract(source, names={"copy"})
    with pytest.raises(ToolSourceError) as exc_info:
        build_toolset(module, {"copy": lambda a, b: ("", None)})
    assert exc_info.value.code == "DUPLICATE_PARAM"


def test_build_toolset_arity_mismatch():
    with pytest.raises(ToolSourceError) as exc_info:
        _toolset({"patch_file": lambda path, before: ("", None)})
    assert exc_info.value.code == "ARITY_MISMATCH"
    assert exc_info.value.extra["tool"] == "patch_file"

    with pytest.raises(ToolSourceError) as exc_info:
        _toolset({"shell": lambda: ("", None)})
    assert exc_info.value.code == "ARITY_MISMATCH"


def test_build_toolset_accepts_compatible_callables():
    def shell_with_default(command, timeout=30):
        return command, None

    def shell_varargs(*args):
        return args[0], None

    assert _toolset({"shell": shell_with_default}).dispatch["shell"].func is shell_with_default
    assert _toolset({"shell": shell_varargs}).dispatch["shell"].func is shell_varargs


def test_toolset_from_defs_duplicate_names_keep_last():
    first = ToolDef(name="read_file", description="first", params={})
    second = ToolDef(
        name="read_file",
        description="second",
        params={"path": ToolParam(name="path", description="path", required=True, schema={"type": "string"})},
    )

    toolset = toolset_from_defs([first, second], {"read_file": ReadFile})
    assert toolset.tools == [second]
    assert toolset.dispatch["read_file"].param_names == ("path",)
