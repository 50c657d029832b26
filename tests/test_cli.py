"""Tests for the python -m axis command-line host."""

import json

import pytest

from axis.__main__ import main


@pytest.fixture
def run(tmp_path, clean_axis_env, capsys):
    """Run the CLI against an isolated data dir; returns (exit_code, stdout)."""
    data_dir = tmp_path / "data"
    no_env = tmp_path / "missing.env"

    def _run(*argv):
        code = main(["--data-dir", str(data_dir), "--env-file", str(no_env), *argv])
        return code, capsys.readouterr().out

    return _run


class TestCredentialsCommands:

    def test_set_then_show_json(self, run):
        code, _ = run("credentials", "set",
                      "--jira-base-url", "https://acme.atlassian.net",
                      "--jira-api-token", "ATATT3xFfGF0abcd")
        assert code == 0

        code, out = run("credentials", "show", "--json")
        assert code == 0
        data = json.loads(out)
        assert data["jira_base_url"]["masked"] == "https://acme.atlassian.net"
        assert data["jira_api_token"]["masked"] == "ATAT****abcd"
        assert data["azure_pat"]["exists"] is False

    def test_show_table(self, run):
        run("credentials", "set", "--azure-org", "acme")
        code, out = run("credentials", "show")
        assert code == 0
        assert "azure_org" in out and "acme" in out
        assert "(not set)" in out

    def test_check_exit_codes(self, run):
        code, out = run("credentials", "check", "browserstack")
        assert code == 1
        assert "missing" in out

        run("credentials", "set", "--browserstack-username", "u", "--browserstack-access-key", "k")
        code, out = run("credentials", "check", "browserstack")
        assert code == 0
        assert "configured" in out

    def test_check_unknown_service(self, run):
        code, _ = run("credentials", "check", "github")
        assert code == 1

    def test_check_uses_environment(self, run, monkeypatch):
        monkeypatch.setenv("AXIS_AZURE_ORG", "acme")
        monkeypatch.setenv("AXIS_AZURE_PROJECT", "web")
        monkeypatch.setenv("AXIS_AZURE_PAT", "pat")
        code, _ = run("credentials", "check", "azure")
        assert code == 0

    def test_clear(self, run):
        run("credentials", "set", "--azure-org", "acme")
        code, _ = run("credentials", "clear")
        assert code == 0
        _, out = run("credentials", "show", "--json")
        assert json.loads(out)["azure_org"]["exists"] is False

    def test_set_without_fields(self, run):
        code, _ = run("credentials", "set")
        assert code == 2


class TestPagesCommands:

    def test_root(self, run, page_repo):
        code, out = run("pages", "root", str(page_repo))
        assert code == 0
        assert json.loads(out) == str(page_repo / "pages")

    def test_root_missing(self, run, tmp_path):
        code, out = run("pages", "root", str(tmp_path / "gone"))
        assert code == 1
        assert json.loads(out) is None

    def test_folders(self, run, page_repo):
        _, out = run("pages", "folders", str(page_repo))
        assert json.loads(out) == [
            {"name": "checkout", "path": str(page_repo / "pages" / "checkout"), "kind": "dir"},
            {"name": "login", "path": str(page_repo / "pages" / "login"), "kind": "dir"},
        ]

    def test_files(self, run, page_repo):
        _, out = run("pages", "files", str(page_repo / "pages"))
        assert [e["name"] for e in json.loads(out)] == ["cart.page"]

    def test_scan(self, run, page_repo):
        _, out = run("pages", "scan", str(page_repo / "pages"))
        assert len(json.loads(out)) == 6

    def test_repos(self, run, tmp_path):
        workspace = tmp_path / "ws"
        (workspace / "web-tests" / "pages").mkdir(parents=True)
        _, out = run("pages", "repos", str(workspace))
        repos = json.loads(out)
        assert [r["name"] for r in repos] == ["web-tests"]
        assert repos[0] == {
            "name": "web-tests",
            "path": str(workspace / "web-tests"),
            "has_web_store": False,
        }
