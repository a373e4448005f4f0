"""系统提示词加载工具。

提示词以 markdown 文件的形式随包发布，按名称从本目录读取，
用于构造 ChatMessage(role="system")。
"""

from pathlib import Path


PROMPTS_DIR = Path(__file__).resolve().parent


def load_prompt(name: str) -> str:
    """按名称加载提示词文本，例如 load_prompt("dev_system") 读取 dev_system.md。"""

    fname = PROMPTS_DIR / f"{name}.md"
    return fname.read_text(encoding="utf-8")
