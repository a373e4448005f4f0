"""Tools a developer agent uses to inspect and change the local machine.

The agent can run shell commands and read, write or patch files. Every tool
returns its output as text; when something goes wrong the error is returned
alongside so you can correct the call and try again.

This module's own source is the tool source of AGENT_CONFIG: the docstring of
each public function below is what the model reads as the tool description.
"""

import subprocess
from pathlib import Path
from typing import Optional, Tuple

from naive_agent.agents.base_agent import AgentConfig
from naive_agent.infrastructure.logging.logger import logger
from naive_agent.prompts import load_prompt


_LANGUAGES = {
    ".go": "go",
    ".py": "python",
    ".md": "markdown",
    ".sh": "bash",
}


def _get_language(path: str) -> str:
    return _LANGUAGES.get(Path(path).suffix, "plaintext")


def _fenced(path: str, content: str) -> str:
    return f"```{_get_language(path)}\n{content}\n```"


def shell(command: str) -> Tuple[str, Optional[Exception]]:
    """Executes a command on the shell.

    This will return the output and error concatenated into a single string,
    as you would see from running on the command line. There will also be an
    indication of if the command succeeded or failed.

    Args:
        command: The shell command to run. It can support multiline
            statements, if you need to run more than one at a time.
    """
    logger.info("Shell Command:\n```bash\n%s\n```", command)
    try:
        completed = subprocess.run(
            ["sh", "-c", command],
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
        )
    except OSError as exc:
        logger.info("Command failed: %s", exc)
        return "", exc
    try:
        completed.check_returncode()
    except subprocess.CalledProcessError as exc:
        logger.info("Command failed: %s", exc)
        return completed.stdout, exc
    logger.info("Command succeeded:\n%s", completed.stdout)
    return completed.stdout, None


def read_file(path: str) -> Tuple[str, Optional[Exception]]:
    """Reads the content of the file at path.

    The content is returned as a markdown code block.

    Args:
        path: The path to the file, in the format "path/to/file.txt"
    """
    logger.info("Reading file: %s", path)
    try:
        content = Path(path).expanduser().resolve().read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        return "", exc

    md = _fenced(path, content)
    logger.info("Successfully read file:\n%s", md)
    return md, None


def write_file(path: str, content: str) -> Tuple[str, Optional[Exception]]:
    """Writes a file at the specified path with the provided content.

    This will create any directories if they do not exist. The content will
    fully overwrite the existing file.

    Args:
        path: The destination file path, in the format "path/to/file.txt"
        content: The raw file content.
    """
    logger.info("Writing file: %s", path)
    logger.info(_fenced(path, content))

    target = Path(path).expanduser()
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
    except OSError as exc:
        return "", exc

    return f"Successfully wrote to {path}", None


def patch_file(path: str, before: str, after: str) -> Tuple[str, Optional[Exception]]:
    """Patches the file at the specified path by replacing before with after.

    The before text must be present exactly once in the file, so that it can
    safely be replaced with after.

    Args:
        path: The path to the file, in the format "path/to/file.txt"
        before: The content that will be replaced
        after: The content it will be replaced with
    """
    logger.info("Patching file: %s", path)
    target = Path(path).expanduser().resolve()
    try:
        content = target.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        return "", exc

    count = content.count(before)
    if count > 1:
        return "", ValueError(
            "the before content is present multiple times in the file, be more specific"
        )
    if count < 1:
        return "", ValueError(
            "the before content was not found in file, be careful that you recreate it exactly"
        )

    try:
        target.write_text(content.replace(before, after, 1), encoding="utf-8")
    except OSError as exc:
        return "", exc

    logger.info("%s\n->\n%s", _fenced(path, before), _fenced(path, after))
    return "Successfully replaced before with after.", None


TOOLS = {
    "shell": shell,
    "read_file": read_file,
    "write_file": write_file,
    "patch_file": patch_file,
}

AGENT_CONFIG = AgentConfig(
    system_prompt=load_prompt("dev_system"),
    tool_source=Path(__file__).read_text(encoding="utf-8"),
    tools=TOOLS,
)
