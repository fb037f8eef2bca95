import json
from pathlib import Path

import httpx
from typer.testing import CliRunner

from zp import cli
from zp.cli import app
from zp.client import ZohoClient
from zp.oauth import StaticToken
from zp.transport import Transport


def _load_fixture(name: str):
    path = Path(__file__).parent / "fixtures" / name
    return json.loads(path.read_text())


def test_missing_configuration_is_a_usage_error(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    for name in ("ZOHO_CLIENT_ID", "ZOHO_CLIENT_SECRET", "ZOHO_PORTAL"):
        monkeypatch.delenv(name, raising=False)

    result = CliRunner().invoke(app, ["tasks"])

    assert result.exit_code == 2


def test_tasks_with_subtasks_stops_at_limit(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("ZOHO_CLIENT_ID", "1000.ABC")
    monkeypatch.setenv("ZOHO_CLIENT_SECRET", "s3cret")
    monkeypatch.setenv("ZOHO_PORTAL", "acme")
    monkeypatch.setenv("ZOHO_PROJECT", "Website")
    monkeypatch.setenv("ZP_DATA_DIR", str(tmp_path / "data"))

    routes = {
        "portals/": _load_fixture("portals.json"),
        "portal/10/projects/": _load_fixture("projects.json"),
        "portal/10/projects/200/tasks/": _load_fixture("tasks.json"),
        "portal/10/projects/200/tasks/501/subtasks/": {
            "tasks": [{"id": 601, "name": "Draft copy"}, {"id": 602, "name": "Review copy"}]
        },
    }
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        path = request.url.path.removeprefix("/restapi/")
        seen.append(path)
        if request.url.params.get("index", "0") != "0" or path not in routes:
            return httpx.Response(204)
        return httpx.Response(200, json=routes[path])

    http = httpx.Client(transport=httpx.MockTransport(handler))
    monkeypatch.setattr(cli, "_create_client", lambda settings: ZohoClient(StaticToken("t"), Transport(http)))

    result = CliRunner().invoke(app, ["tasks", "--subtasks", "--limit", "3"])

    assert result.exit_code == 0, result.output
    assert "WEB-T1" in result.output
    assert "601" in result.output
    assert "602" not in result.output
    assert seen[-1] == "portal/10/projects/200/tasks/501/subtasks/"
