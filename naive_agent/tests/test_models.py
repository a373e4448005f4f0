from naive_agent.domain.exceptions import BusinessError, ToolSourceError, ValidationError
from naive_agent.domain.models import ChatChoice, ChatMessage, ChatRequest, ChatResult


def test_models_exist():
    cm = ChatMessage(role="user", content="hi")
    assert cm.role == "user"
    assert cm.tool_calls is None

    req = ChatRequest(model="m")
    assert req.messages == []
    assert req.tools is None

    res = ChatResult(provider="p", model="m", choices=[ChatChoice(index=0, message=cm)])
    assert res.message is cm


def test_tool_source_error_is_validation_error():
    err = ToolSourceError(code="MISSING_TOOLS", message="missing tools", missing=["shell"])
    assert isinstance(err, ValidationError)
    assert isinstance(err, BusinessError)
    assert str(err) == "missing tools"
    assert err.extra == {"missing": ["shell"]}
