"""统一业务异常模型。

所有跨模块抛出的业务级错误都应该继承自 BusinessError，
便于在调用方统一捕获与提示。

两类错误的处理方式不同：
- 构造期错误（ToolSourceError）：工具源码无法解析、缺少模块文档、
  注册表与源码不匹配，Agent 不会被创建。
- 运行期错误（NetworkError / ApiError / RateLimitError / ChatRequestError）：
  中止当前 request 调用。工具自身的失败不会以异常形式出现，
  而是转成文本交还给模型。
"""


class BusinessError(Exception):
    """业务异常基类。

    Attributes:
        code: 机器可读错误码（如 "MISSING_TOOLS"）。
        message: 用户可读错误信息。
        http_status: 映射到 HTTP 时可用的状态码，默认 400。
        extra: 其他补充字段（例如 provider、缺失的工具名等）。
    """

    def __init__(self, code: str, message: str, http_status: int = 400, **extra):
        self.code = code
        self.message = message
        self.http_status = http_status
        self.extra = extra
        super().__init__(message)


class NetworkError(BusinessError):
    """网络层错误，例如连接失败、超时等。"""


class ApiError(BusinessError):
    """模型端点返回非 2xx/429 错误，或响应格式不可用时抛出。"""


class RateLimitError(BusinessError):
    """Provider 限流错误，本层不做重试。"""


class ValidationError(BusinessError):
    """参数或配置校验失败。"""


class ToolSourceError(ValidationError):
    """工具源码解析或注册表匹配失败，属于构造期的致命错误。"""


class ChatRequestError(BusinessError):
    """一次 Agent.request 中调用模型端点失败。

    原始的 Provider 异常通过 __cause__ 保留。
    """
