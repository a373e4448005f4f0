import os
import tempfile

# 日志写到临时目录，避免测试在工作目录下生成 logs/
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="naive-agent-logs-"))
