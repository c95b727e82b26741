"""API 测试 fixtures

路由测试只验证 HTTP 层：请求解析、错误映射、响应结构（camelCase）。
用例通过 app.dependency_overrides 替换为 AsyncMock，不触发 lifespan。
"""

from collections.abc import Iterator
from unittest.mock import AsyncMock, Mock

import pytest
from fastapi.testclient import TestClient

from pipestation.domain.entities import Pipeline, PipelineDefinition
from pipestation.interfaces.api.dependencies.current_user import get_current_user_id
from pipestation.interfaces.api.main import app


@pytest.fixture
def client() -> Iterator[TestClient]:
    """已登录为 user-1 的测试客户端"""
    app.dependency_overrides[get_current_user_id] = lambda: "user-1"
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def override_use_case():
    """用 AsyncMock 替换某个用例依赖，返回该 mock"""

    def _override(factory, **methods) -> Mock:
        use_case = Mock()
        for name, value in methods.items():
            if isinstance(value, BaseException):
                setattr(use_case, name, AsyncMock(side_effect=value))
            else:
                setattr(use_case, name, AsyncMock(return_value=value))
        app.dependency_overrides[factory] = lambda: use_case
        return use_case

    return _override


@pytest.fixture
def pipeline(pipeline_payload) -> Pipeline:
    return Pipeline.create(
        user_id="user-1",
        title=pipeline_payload["title"],
        definition=PipelineDefinition.from_dict(pipeline_payload),
        summary=pipeline_payload["summary"],
        is_public=True,
    )
