"""
Transport Tests

The function-style handler, the FastAPI service and the compile CLI all map
pipeline results onto the same status codes and bodies.

Run with:
    pytest tests/test_api.py -v
"""

import json

import pytest
from click.testing import CliRunner
from fastapi.testclient import TestClient

from contractsmith.api import handler
from contractsmith.api import function
from contractsmith.api.function import get_pipeline
from contractsmith.api.main import app, limiter
from contractsmith.cli.compile import cli


def write_template(workspace, text):
    (workspace / "templates" / "EthTemplate.sol").write_text(text, encoding="utf-8")


# ============================================================================
# Function handler
# ============================================================================


class TestHandler:

    def test_success_response(self, make_pipeline):
        response = handler({"httpMethod": "POST", "body": "ignored"}, None, pipeline=make_pipeline())

        assert response["statusCode"] == 200
        body = json.loads(response["body"])
        assert set(body) == {"abi", "bytecode"}
        assert body["bytecode"].startswith("0x")

    def test_event_contents_are_ignored(self, make_pipeline):
        pipeline = make_pipeline()
        first = handler({"contract": "Anything"}, None, pipeline=pipeline)
        second = handler(None, None, pipeline=pipeline)
        assert first == second

    @pytest.mark.parametrize("template, status, kind", [
        ("contract OtherContract {}", 404, "artifact_not_found"),
        ("contract StonerSharks { SYNTAX_ERROR }", 422, "compiler_diagnostic_error"),
        ("contract StonerSharks { ${UNDEFINED} }", 500, "content_evaluation_error"),
    ])
    def test_error_responses_are_tagged(self, make_pipeline, workspace, template, status, kind):
        write_template(workspace, template)
        response = handler({}, None, pipeline=make_pipeline())

        assert response["statusCode"] == status
        body = json.loads(response["body"])
        assert body["ok"] is False
        assert body["error"]["kind"] == kind
        assert body["error"]["message"]

    def test_storage_error_response(self, make_pipeline, workspace):
        (workspace / "templates" / "EthTemplate.sol").unlink()
        response = handler({}, None, pipeline=make_pipeline())
        assert response["statusCode"] == 503
        assert json.loads(response["body"])["error"]["kind"] == "storage_error"

    def test_unexpected_failure_is_structured(self):
        class Exploding:
            template_name = "EthTemplate.sol"
            contract_name = "StonerSharks"

            def run(self):
                raise RuntimeError("boom")

        response = handler({}, None, pipeline=Exploding())

        assert response["statusCode"] == 500
        assert json.loads(response["body"]) == {
            "ok": False,
            "error": {"kind": "internal_error", "message": "Internal Server Error", "details": {}},
        }

    def test_bad_configuration_is_structured(self, tmp_path, monkeypatch):
        broken = tmp_path / "bad.toml"
        broken.write_text("[service\nport = ", encoding="utf-8")
        monkeypatch.setenv("CONTRACTSMITH_CONFIG", str(broken))
        monkeypatch.setattr(function, "_pipeline", None)

        response = handler({}, None)

        assert response["statusCode"] == 500
        error = json.loads(response["body"])["error"]
        assert error["kind"] == "configuration_error"
        assert "Invalid TOML" in error["message"]
        assert function._pipeline is None

    def test_reset_pipeline_drops_cache(self, make_pipeline, monkeypatch):
        monkeypatch.setattr(function, "_pipeline", make_pipeline())
        assert get_pipeline() is function._pipeline
        function.reset_pipeline()
        assert function._pipeline is None


# ============================================================================
# HTTP service
# ============================================================================


@pytest.fixture
def client(make_pipeline):
    pipeline = make_pipeline()
    app.dependency_overrides[get_pipeline] = lambda: pipeline
    limiter.reset()
    try:
        yield TestClient(app, raise_server_exceptions=False)
    finally:
        app.dependency_overrides.clear()


class TestHTTPService:

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"
        assert response.json()["contract"]

    def test_compile_post(self, client):
        response = client.post("/compile", json={"ignored": True})
        assert response.status_code == 200
        body = response.json()
        assert body["bytecode"].startswith("0x")
        assert isinstance(body["abi"], list)

    def test_compile_get_matches_post(self, client):
        assert client.get("/compile").json() == client.post("/compile").json()

    def test_compile_error_status(self, client, workspace):
        write_template(workspace, "contract OtherContract {}")
        response = client.post("/compile")
        assert response.status_code == 404
        assert response.json()["error"]["kind"] == "artifact_not_found"

    def test_unexpected_failure_is_structured(self):
        class Exploding:
            template_name = "EthTemplate.sol"
            contract_name = "StonerSharks"

            def run(self):
                raise RuntimeError("boom")

        app.dependency_overrides[get_pipeline] = lambda: Exploding()
        limiter.reset()
        try:
            response = TestClient(app, raise_server_exceptions=False).post("/compile")
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 500
        assert response.json() == {
            "ok": False,
            "error": {"kind": "internal_error", "message": "Internal Server Error", "details": {}},
        }


# ============================================================================
# CLI
# ============================================================================


@pytest.fixture
def cli_config(workspace, tmp_path, monkeypatch):
    """config.toml pointing at the workspace, with FakeSolc behind the pipeline."""
    from conftest import FakeSolc
    from contractsmith.compiler import invoker

    fake = FakeSolc()
    monkeypatch.setattr(invoker.SolcxBackend, "compile_json", lambda self, input_json: fake.compile_json(input_json))
    path = tmp_path / "cli.toml"
    path.write_text(
        f'[template]\nbase_dir = "{workspace.as_posix()}"\n'
        '[template.variables]\nSOLIDITY_PRAGMA = "^0.8.20"\nTOKEN_NAME = "Stoner Sharks"\n'
        '[imports]\ndependency_root = "deps"\n',
        encoding="utf-8",
    )
    return path


class TestCompileCLI:

    def test_prints_payload(self, cli_config):
        result = CliRunner().invoke(cli, ["--config", str(cli_config)])
        assert result.exit_code == 0, result.output
        # Log records share the console stream with the payload
        assert '"bytecode": "0x6080' in result.output
        assert '"abi": [' in result.output

    def test_writes_artifact_files(self, cli_config, tmp_path):
        out = tmp_path / "build"
        result = CliRunner().invoke(cli, ["--config", str(cli_config), "--output-dir", str(out)])
        assert result.exit_code == 0, result.output
        assert json.loads((out / "StonerSharks.abi").read_text(encoding="utf-8"))
        assert (out / "StonerSharks.bin").read_text(encoding="utf-8").startswith("0x")

    def test_failure_exits_non_zero(self, cli_config, workspace):
        write_template(workspace, "contract OtherContract {}")
        result = CliRunner().invoke(cli, ["--config", str(cli_config)])
        assert result.exit_code == 1
        assert "artifact_not_found" in result.output
