"""测试：日志配置"""

import json
import logging
import sys

from pipestation.interfaces.api.main import build_log_formatter


def _record(exc_info=None) -> logging.LogRecord:
    return logging.LogRecord(
        name="pipestation.push",
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg="推送失败: %s",
        args=("gone",),
        exc_info=exc_info,
    )


def test_json_format_emits_one_object_per_record():
    line = build_log_formatter("json").format(_record())

    entry = json.loads(line)
    assert "\n" not in line
    assert entry["level"] == "warning"
    assert entry["logger"] == "pipestation.push"
    assert entry["event"] == "推送失败: gone"
    assert "timestamp" in entry
    assert "_record" not in entry
    assert "exception" not in entry


def test_json_format_renders_exception():
    try:
        raise RuntimeError("boom")
    except RuntimeError:
        record = _record(exc_info=sys.exc_info())

    entry = json.loads(build_log_formatter("json").format(record))

    assert "RuntimeError: boom" in entry["exception"]


def test_text_format_is_plain_line():
    line = build_log_formatter("text").format(_record())

    assert line.endswith("pipestation.push - WARNING - 推送失败: gone")
