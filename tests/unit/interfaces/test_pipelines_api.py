"""测试：Pipelines API 路由"""

from pipestation.domain.exceptions import ForbiddenError, NotFoundError, ValidationError
from pipestation.interfaces.api.dependencies.use_cases import (
    get_clone_pipeline_use_case,
    get_create_pipeline_use_case,
    get_delete_pipeline_use_case,
    get_get_pipeline_use_case,
    get_list_pipelines_use_case,
    get_update_pipeline_use_case,
    get_validate_pipeline_use_case,
)


class TestCreatePipelineAPI:
    def test_create_returns_201_with_camel_case_fields(
        self, client, override_use_case, pipeline, pipeline_payload
    ):
        use_case = override_use_case(get_create_pipeline_use_case, execute=pipeline)

        response = client.post("/api/pipelines", json={**pipeline_payload, "isPublic": True})

        assert response.status_code == 201
        body = response.json()["pipeline"]
        assert body["id"] == pipeline.id
        assert body["userId"] == "user-1"
        assert body["isPublic"] is True
        assert body["shareToken"] == pipeline.share_token
        assert body["cloneCount"] == 0
        assert body["trigger"]["type"] == "webhook"
        assert [node["id"] for node in body["nodes"]] == ["n1", "n2"]
        assert body["pipes"][0]["sourceId"] == "n1"

        input_data = use_case.execute.await_args.args[0]
        assert input_data.user_id == "user-1"
        assert input_data.is_public is True
        assert input_data.pipes == pipeline_payload["pipes"]

    def test_validation_errors_are_listed(self, client, override_use_case):
        override_use_case(
            get_create_pipeline_use_case,
            execute=ValidationError(["title is required", "trigger is required"]),
        )

        response = client.post("/api/pipelines", json={"nodes": []})

        assert response.status_code == 400
        assert response.json()["detail"] == {
            "code": "VALIDATION_ERROR",
            "message": "title is required; trigger is required",
            "errors": ["title is required", "trigger is required"],
        }

    def test_unexpected_error_is_500(self, client, override_use_case, pipeline_payload):
        override_use_case(get_create_pipeline_use_case, execute=RuntimeError("disk full"))

        response = client.post("/api/pipelines", json=pipeline_payload)

        assert response.status_code == 500
        assert response.json()["detail"] == "Internal server error: disk full"


class TestReadPipelinesAPI:
    def test_list_omits_definition(self, client, override_use_case, pipeline):
        override_use_case(get_list_pipelines_use_case, execute=[pipeline])

        response = client.get("/api/pipelines")

        assert response.status_code == 200
        [summary] = response.json()["pipelines"]
        assert summary["title"] == "订单同步"
        assert "nodes" not in summary
        assert "updatedAt" in summary

    def test_get_not_found(self, client, override_use_case):
        override_use_case(get_get_pipeline_use_case, execute=NotFoundError("Pipeline", "p-x"))

        response = client.get("/api/pipelines/p-x")

        assert response.status_code == 404
        assert "p-x" in response.json()["detail"]

    def test_get_forbidden(self, client, override_use_case):
        override_use_case(get_get_pipeline_use_case, execute=ForbiddenError())

        assert client.get("/api/pipelines/p-1").status_code == 403

    def test_validation_report(self, client, override_use_case):
        report = {
            "valid": False,
            "structure": ["Pipe p1 references unknown target node: n9"],
            "trigger": [],
            "nodes": {"n2": ["url is required"]},
            "cron": "30 8 * * 1,3",
        }
        override_use_case(get_validate_pipeline_use_case, execute=report)

        response = client.get("/api/pipelines/p-1/validation")

        assert response.status_code == 200
        assert response.json() == report


class TestUpdatePipelineAPI:
    def test_only_present_fields_are_forwarded(self, client, override_use_case, pipeline):
        use_case = override_use_case(get_update_pipeline_use_case, execute=pipeline)

        response = client.put(f"/api/pipelines/{pipeline.id}", json={"title": "X"})

        assert response.status_code == 200
        input_data = use_case.execute.await_args.args[0]
        assert input_data.pipeline_id == pipeline.id
        assert input_data.title == "X"
        assert not input_data.touches_definition

    def test_camel_case_flag_is_accepted(self, client, override_use_case, pipeline):
        use_case = override_use_case(get_update_pipeline_use_case, execute=pipeline)

        client.put(f"/api/pipelines/{pipeline.id}", json={"isPublic": False, "nodes": []})

        input_data = use_case.execute.await_args.args[0]
        assert input_data.is_public is False
        assert input_data.nodes == []

    def test_update_forbidden(self, client, override_use_case):
        override_use_case(get_update_pipeline_use_case, execute=ForbiddenError())

        assert client.put("/api/pipelines/p-1", json={"title": "X"}).status_code == 403


class TestClonePipelineAPI:
    def test_clone_returns_201(self, client, override_use_case, pipeline):
        clone = pipeline.clone_for("user-1")
        use_case = override_use_case(get_clone_pipeline_use_case, execute=clone)

        response = client.post(f"/api/pipelines/clone/{pipeline.share_token}")

        assert response.status_code == 201
        assert response.json()["pipeline"]["clonedFrom"] == pipeline.id
        use_case.execute.assert_awaited_once_with(pipeline.share_token, "user-1")

    def test_clone_unknown_token(self, client, override_use_case):
        override_use_case(
            get_clone_pipeline_use_case, execute=NotFoundError("Pipeline", "share token")
        )

        assert client.post("/api/pipelines/clone/nope").status_code == 404


class TestDeletePipelineAPI:
    def test_delete(self, client, override_use_case):
        use_case = override_use_case(get_delete_pipeline_use_case, execute=None)

        response = client.delete("/api/pipelines/p-1")

        assert response.status_code == 200
        assert response.json() == {"success": True}
        use_case.execute.assert_awaited_once_with("p-1", "user-1")
