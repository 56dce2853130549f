from typer.testing import CliRunner

import nexus.app as nexus_app
from nexus.app import Nexus
from nexus.cli import app
from nexus.config import LatencyConfig, NexusConfig
from nexus.persistence import InMemoryStorage


def _setup_app() -> Nexus:
    instance = Nexus(NexusConfig(latency=LatencyConfig(enabled=False)), storage=InMemoryStorage())
    nexus_app._app_instance = instance
    return instance


def test_clients_list_prints_rows_and_footer():
    _setup_app()
    runner = CliRunner()
    result = runner.invoke(app, ["clients", "list", "--sort-by", "totalRevenue", "--order", "desc"])
    assert result.exit_code == 0, f"Command failed. Output: {result.stdout}"
    lines = result.stdout.strip().splitlines()
    assert lines[0].startswith("client-1\tAcme Corporation")
    assert lines[-1] == "page 1/1 (total 3)"


def test_clients_list_search_and_paging():
    _setup_app()
    runner = CliRunner()
    result = runner.invoke(app, ["clients", "list", "--search", "GLOBAL"])
    assert "Global Industries" in result.stdout
    assert "page 1/1 (total 1)" in result.stdout

    result = runner.invoke(app, ["clients", "list", "--page", "2", "--limit", "2"])
    assert "TechStart Inc" in result.stdout
    assert "page 2/2 (total 3)" in result.stdout


def test_invalid_queries_exit_2():
    _setup_app()
    runner = CliRunner()
    assert runner.invoke(app, ["clients", "list", "--sort-by", "bogus"]).exit_code == 2
    assert runner.invoke(app, ["clients", "list", "--page", "0"]).exit_code == 2
    assert runner.invoke(app, ["clients", "list", "--order", "sideways"]).exit_code == 2


def test_clients_show_and_missing():
    _setup_app()
    runner = CliRunner()
    result = runner.invoke(app, ["clients", "show", "client-1"])
    assert result.exit_code == 0
    assert '"name": "Acme Corporation"' in result.stdout

    missing = runner.invoke(app, ["clients", "show", "missing-id"])
    assert missing.exit_code == 1
    assert "Client not found" in missing.stdout


def test_users_list_with_role_filter():
    _setup_app()
    result = CliRunner().invoke(app, ["users", "list", "--role", "se", "--limit", "2"])
    assert result.exit_code == 0
    assert "John Smith" in result.stdout
    assert "page 1/2 (total 3)" in result.stdout


def test_users_create_validation_exit_2():
    instance = _setup_app()
    runner = CliRunner()
    bad = runner.invoke(app, ["users", "create", "--email", "x@y.com", "--name", "X", "--role", "owner"])
    assert bad.exit_code == 2
    assert len(instance.store.users) == 8

    good = runner.invoke(app, ["users", "create", "--email", "x@y.com", "--name", "X", "--role", "se"])
    assert good.exit_code == 0
    assert "User created successfully" in good.stdout
    assert len(instance.store.users) == 9


def test_workflows_toggle_and_stats():
    _setup_app()
    runner = CliRunner()
    result = runner.invoke(app, ["workflows", "toggle", "1"])
    assert result.exit_code == 0
    assert "Workflow deactivated successfully" in result.stdout

    stats = runner.invoke(app, ["workflows", "stats"])
    assert "activeWorkflows: 1" in stats.stdout

    assert runner.invoke(app, ["workflows", "toggle", "42"]).exit_code == 1


def test_workflows_pipeline():
    _setup_app()
    result = CliRunner().invoke(app, ["workflows", "pipeline", "--status", "testing_started"])
    assert result.exit_code == 0
    assert "Customer Support Ticket Routing" in result.stdout
    assert "page 1/1 (total 1)" in result.stdout


def test_plans_and_client_metrics():
    _setup_app()
    runner = CliRunner()
    assert "mostPopularPricingModel: Usage" in runner.invoke(app, ["plans", "stats"]).stdout
    assert "totalClients: 3" in runner.invoke(app, ["clients", "metrics"]).stdout
    assert "totalAdmins: 2" in runner.invoke(app, ["users", "stats"]).stdout
    assert "Starter" in runner.invoke(app, ["plans", "list", "--search", "usage"]).stdout


def test_exceptions_list_and_resolve():
    _setup_app()
    runner = CliRunner()
    listed = runner.invoke(app, ["exceptions", "list", "--status", "open"])
    assert "exc-1" in listed.stdout
    assert "exc-2" not in listed.stdout

    resolved = runner.invoke(app, ["exceptions", "resolve", "exc-1", "Handled manually"])
    assert resolved.exit_code == 0
    assert "exc-1\tworkflow-2\tresolved" in resolved.stdout

    again = runner.invoke(app, ["exceptions", "resolve", "exc-2", "Again"])
    assert again.exit_code == 1
    assert "Exception already resolved" in again.stdout


def test_dashboard_metrics():
    _setup_app()
    runner = CliRunner()
    result = runner.invoke(app, ["dashboard", "metrics", "--filter", "30d"])
    assert result.exit_code == 0
    assert "total_workflows: 25 (+13.6%)" in result.stdout
    assert runner.invoke(app, ["dashboard", "metrics", "--filter", "1y"]).exit_code == 1


def test_auth_commands():
    _setup_app()
    runner = CliRunner()
    assert runner.invoke(app, ["auth", "whoami"]).exit_code == 1

    login = runner.invoke(app, ["auth", "login", "admin@usebraintrust.com", "--password", "pw"])
    assert login.exit_code == 0
    assert "Signed in as admin (admin)" in login.stdout

    whoami = runner.invoke(app, ["auth", "whoami"])
    assert "admin@usebraintrust.com\tadmin\tadmin portal" in whoami.stdout

    runner.invoke(app, ["auth", "logout"])
    assert runner.invoke(app, ["auth", "whoami"]).exit_code == 1
