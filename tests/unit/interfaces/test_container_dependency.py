"""测试：从 app.state 读取 ApiContainer"""

from types import SimpleNamespace
from unittest.mock import Mock

import pytest

from pipestation.interfaces.api.dependencies.container import get_container


def _request(**state):
    return SimpleNamespace(app=SimpleNamespace(state=SimpleNamespace(**state)))


def test_returns_container_from_app_state():
    container = Mock()

    assert get_container(_request(container=container)) is container


def test_missing_container_is_an_error():
    with pytest.raises(RuntimeError, match="ApiContainer missing"):
        get_container(_request())
