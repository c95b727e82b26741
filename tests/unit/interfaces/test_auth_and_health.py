"""测试：Bearer 认证依赖与健康检查

这里不覆盖 get_current_user_id，请求经过真实的 JWT 校验
"""

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from pipestation.infrastructure.auth.jwt_service import JWTService
from pipestation.interfaces.api.dependencies.use_cases import get_list_pipelines_use_case
from pipestation.interfaces.api.main import app


@pytest.fixture
def anonymous_client(override_use_case):
    use_case = override_use_case(get_list_pipelines_use_case, execute=[])
    yield TestClient(app), use_case
    app.dependency_overrides.clear()


class TestBearerAuth:
    def test_valid_token(self, anonymous_client, auth_headers):
        client, use_case = anonymous_client

        response = client.get("/api/pipelines", headers=auth_headers("user-42"))

        assert response.status_code == 200
        use_case.execute.assert_awaited_once_with("user-42")

    @pytest.mark.parametrize(
        "headers, detail",
        [
            ({}, "Missing authorization header"),
            ({"Authorization": "Bearer"}, "Invalid authorization header"),
            ({"Authorization": "Basic dXNlcjpwYXNz"}, "Invalid authentication scheme"),
            ({"Authorization": "Bearer not-a-jwt"}, "Token无效"),
        ],
    )
    def test_rejected_headers(self, anonymous_client, headers, detail):
        client, use_case = anonymous_client

        response = client.get("/api/pipelines", headers=headers)

        assert response.status_code == 401
        assert response.json()["detail"] == detail
        use_case.execute.assert_not_awaited()

    def test_expired_token(self, anonymous_client):
        client, _ = anonymous_client
        token = JWTService.create_access_token({"sub": "user-1"}, timedelta(seconds=-5))

        response = client.get("/api/pipelines", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401
        assert response.json()["detail"] == "Token已过期"

    def test_token_without_subject(self, anonymous_client):
        client, _ = anonymous_client
        token = JWTService.create_access_token({"role": "admin"})

        response = client.get("/api/pipelines", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid token payload"


def test_health_check():
    response = TestClient(app).get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
