"""
Unit tests for the HTTP server
"""

import pytest
from unittest.mock import AsyncMock, patch

from wct.config import AppConfig
from wct.exceptions import CommandExecutionError
from wct.runner import CommandResult
from wct import server
from wct.server import create_app


def make_runner(exit_code=0, stdout="", stderr=""):
    """Test double for the captured process runner."""
    return AsyncMock(return_value=CommandResult(exit_code=exit_code, stdout=stdout, stderr=stderr))


@pytest.fixture
def runner():
    return make_runner(stdout="ok\n")


@pytest.fixture
async def client(aiohttp_client, runner):
    return await aiohttp_client(create_app(AppConfig(), runner=runner))


class TestDiscoveryEndpoints:
    """Test health and command listing."""
    
    @pytest.mark.asyncio
    async def test_health(self, client):
        response = await client.get("/health")
        assert response.status == 200
        assert await response.json() == {"status": "ok"}
    
    @pytest.mark.asyncio
    async def test_commands(self, client):
        response = await client.get("/commands")
        assert response.status == 200
        data = await response.json()
        assert data["commands"] == [
            {"name": "test:issuance", "method": ["GET", "POST"], "path": "/test/issuance"},
            {"name": "test:presentation", "method": ["GET", "POST"], "path": "/test/presentation"},
        ]
        assert data["options"] == [
            "fileIni", "credentialIssuerUri", "presentationAuthorizeUri", "credentialTypes",
            "timeout", "maxRetries", "logLevel", "logFile", "port", "saveCredential",
        ]
    
    @pytest.mark.asyncio
    async def test_unknown_route(self, client):
        response = await client.get("/test/unknown")
        assert response.status == 404


class TestTestEndpoints:
    """Test the test command endpoints."""
    
    @pytest.mark.asyncio
    async def test_successful_run(self, client, runner):
        response = await client.post("/test/issuance", json={"timeout": "30"})
        
        assert response.status == 200
        assert await response.json() == {
            "command": "test:issuance",
            "exitCode": 0,
            "stdout": "ok\n",
            "stderr": "",
        }
        command, args, env = runner.call_args.args
        assert command == "pnpm"
        assert args == ["test:issuance"]
        assert env["CONFIG_TIMEOUT"] == "30"
    
    @pytest.mark.asyncio
    async def test_presentation_get_with_query(self, client, runner):
        response = await client.get(
            "/test/presentation",
            params={"presentation-authorize-uri": "https://verifier.example/authorize", "save-credential": "no"}
        )
        
        assert response.status == 200
        assert (await response.json())["command"] == "test:presentation"
        env = runner.call_args.args[2]
        assert env["CONFIG_PRESENTATION_AUTHORIZE_URI"] == "https://verifier.example/authorize"
        assert env["CONFIG_SAVE_CREDENTIAL"] == "false"
    
    @pytest.mark.asyncio
    async def test_invalid_timeout_rejected(self, client, runner):
        response = await client.post("/test/issuance", json={"timeout": "notanumber"})
        
        assert response.status == 400
        assert await response.json() == {"errors": ["Invalid numeric value for timeout."]}
        runner.assert_not_called()
    
    @pytest.mark.asyncio
    async def test_all_errors_reported(self, client, runner):
        response = await client.get("/test/presentation", params={"port": "x", "saveCredential": "maybe"})
        
        assert response.status == 400
        assert await response.json() == {
            "errors": ["Invalid numeric value for port.", "Invalid boolean value for save-credential."]
        }
        runner.assert_not_called()
    
    @pytest.mark.asyncio
    async def test_body_overrides_query(self, client, runner):
        response = await client.post("/test/issuance?timeout=10", json={"timeout": 20})
        
        assert response.status == 200
        assert runner.call_args.args[2]["CONFIG_TIMEOUT"] == "20"
    
    @pytest.mark.asyncio
    async def test_repeated_query_parameters_joined(self, client, runner):
        response = await client.get("/test/issuance?credentialTypes=a&credentialTypes=b")
        
        assert response.status == 200
        assert runner.call_args.args[2]["CONFIG_CREDENTIAL_TYPES"] == "a,b"
    
    @pytest.mark.asyncio
    async def test_body_array_joined(self, client, runner):
        await client.post("/test/issuance", json={"credential-types": ["PersonIdentificationData", "mDL"]})
        assert runner.call_args.args[2]["CONFIG_CREDENTIAL_TYPES"] == "PersonIdentificationData,mDL"
    
    @pytest.mark.asyncio
    async def test_nonzero_exit_is_server_error(self, aiohttp_client):
        runner = make_runner(exit_code=1, stdout="1 failing\n", stderr="AssertionError\n")
        client = await aiohttp_client(create_app(AppConfig(), runner=runner))
        
        response = await client.post("/test/presentation")
        
        assert response.status == 500
        assert await response.json() == {
            "command": "test:presentation",
            "exitCode": 1,
            "stdout": "1 failing\n",
            "stderr": "AssertionError\n",
        }
    
    @pytest.mark.asyncio
    async def test_terminated_run_is_server_error(self, aiohttp_client):
        runner = make_runner(exit_code=None)
        client = await aiohttp_client(create_app(AppConfig(), runner=runner))
        
        response = await client.get("/test/issuance")
        
        assert response.status == 500
        assert (await response.json())["exitCode"] is None
    
    @pytest.mark.asyncio
    async def test_command_cannot_start(self, aiohttp_client):
        runner = AsyncMock(side_effect=CommandExecutionError(
            "[Errno 2] No such file or directory: 'pnpm'", command="pnpm", args=["test:issuance"]
        ))
        client = await aiohttp_client(create_app(AppConfig(), runner=runner))
        
        response = await client.post("/test/issuance")
        
        assert response.status == 500
        assert await response.json() == {
            "error": "command_execution_failed",
            "message": "[Errno 2] No such file or directory: 'pnpm'",
        }
    
    @pytest.mark.asyncio
    async def test_configured_executable(self, aiohttp_client, runner):
        config = AppConfig.model_validate({"runner": {"executable": "npm"}})
        client = await aiohttp_client(create_app(config, runner=runner))
        
        await client.get("/test/issuance")
        
        assert runner.call_args.args[0] == "npm"


class TestRequestBody:
    """Test handling of malformed request bodies."""
    
    @pytest.mark.asyncio
    async def test_invalid_json(self, client, runner):
        response = await client.post(
            "/test/issuance", data="{not json", headers={"Content-Type": "application/json"}
        )
        assert response.status == 400
        assert await response.json() == {"errors": ["Invalid JSON body."]}
        runner.assert_not_called()
    
    @pytest.mark.asyncio
    async def test_non_object_json(self, client, runner):
        response = await client.post("/test/issuance", json=["timeout", 5])
        assert response.status == 400
        assert await response.json() == {"errors": ["Request body must be a JSON object."]}
        runner.assert_not_called()
    
    @pytest.mark.asyncio
    async def test_non_json_body_ignored(self, client, runner):
        response = await client.post(
            "/test/issuance?timeout=5", data="timeout=abc", headers={"Content-Type": "text/plain"}
        )
        assert response.status == 200
        assert runner.call_args.args[2]["CONFIG_TIMEOUT"] == "5"
    
    @pytest.mark.asyncio
    async def test_empty_json_body(self, client, runner):
        response = await client.post(
            "/test/issuance", data="", headers={"Content-Type": "application/json"}
        )
        assert response.status == 200


class TestServerMain:
    """Test the wct-server entry point settings."""
    
    @pytest.fixture(autouse=True)
    def clean_environment(self, monkeypatch):
        for name in ["WCT_CLI_SERVER_PORT", "WCT_RUNNER_EXECUTABLE", "WCT_LOG_LEVEL"]:
            monkeypatch.delenv(name, raising=False)
        with patch("wct.server.setup_logging"):
            yield
    
    def run_main(self, argv):
        with patch("wct.server.run_server", new=AsyncMock()) as mock_serve:
            exit_code = server.main(argv)
        return exit_code, mock_serve.call_args.args[0]
    
    def test_port_from_environment(self, monkeypatch):
        monkeypatch.setenv("WCT_CLI_SERVER_PORT", "4100abc")
        exit_code, config = self.run_main([])
        assert exit_code == 0
        assert config.server.port == 4100
    
    def test_invalid_port_from_environment(self, monkeypatch, capsys):
        monkeypatch.setenv("WCT_CLI_SERVER_PORT", "http")
        with patch("wct.server.run_server", new=AsyncMock()) as mock_serve:
            assert server.main([]) == 1
        mock_serve.assert_not_called()
        assert "WCT_CLI_SERVER_PORT" in capsys.readouterr().err
    
    def test_port_flag_overrides_environment(self, monkeypatch):
        monkeypatch.setenv("WCT_CLI_SERVER_PORT", "4100")
        _, config = self.run_main(["--port", "0"])
        assert config.server.port == 0
    
    def test_host_flag_empty_string(self):
        _, config = self.run_main(["--host", ""])
        assert config.server.host == ""
