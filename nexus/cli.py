"""Command line interface over the Nexus mock services."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Optional

import typer
from pydantic import ValidationError

from .app import get_app
from .contracts import ApiResponse
from .errors import AuthenticationError, InvalidQueryError
from .models import (
    Client,
    SubscriptionPlan,
    User,
    Workflow,
    WorkflowData,
    WorkflowException,
)
from .query import ListQuery

app = typer.Typer(help="CLI for the Braintrust Nexus dashboard services")

# Command groups
clients_app = typer.Typer(help="Client accounts")
users_app = typer.Typer(help="Portal users")
workflows_app = typer.Typer(help="Workflows and the delivery pipeline")
plans_app = typer.Typer(help="Subscription plans")
exceptions_app = typer.Typer(help="Workflow exceptions")
dashboard_app = typer.Typer(help="Dashboard metrics")
auth_app = typer.Typer(help="Sign in and out of the mock portal")

app.add_typer(clients_app, name="clients")
app.add_typer(users_app, name="users")
app.add_typer(workflows_app, name="workflows")
app.add_typer(plans_app, name="plans")
app.add_typer(exceptions_app, name="exceptions")
app.add_typer(dashboard_app, name="dashboard")
app.add_typer(auth_app, name="auth")

SEARCH = typer.Option(None, "--search", help="Case-insensitive substring to match")
SORT_BY = typer.Option(None, "--sort-by", help="Field to sort on")
ORDER = typer.Option("asc", "--order", help="asc or desc")
PAGE = typer.Option(1, "--page", help="1-based page number")
LIMIT = typer.Option(10, "--limit", help="Records per page")


@app.callback()
def main() -> None:
    """Nexus CLI entry point."""
    logging.basicConfig(level=get_app().config.log_level)


# ----------------------------------------------------------------------
# Helpers


def _fail(message: str, code: int) -> None:
    typer.echo(message)
    raise typer.Exit(code=code)


def _unwrap(response: ApiResponse) -> Any:
    """Return ``response.data`` or exit 1 with the envelope error."""
    if not response.success:
        _fail(response.error or "Request failed", 1)
    if response.message:
        typer.echo(response.message)
    return response.data


def _list(
    service: Any,
    formatter: Callable[[Any], str],
    search: Optional[str],
    sort_by: Optional[str],
    order: str,
    page: int,
    limit: int,
    **filters: Any,
) -> None:
    try:
        query = ListQuery(search=search, sort_by=sort_by, sort_order=order, page=page, limit=limit)
        response = asyncio.run(service.get_all(query, **filters))
    except (InvalidQueryError, ValidationError) as exc:
        _fail(f"Invalid query: {exc}", 2)

    for record in response.data:
        typer.echo(formatter(record))
    p = response.pagination
    typer.echo(f"page {p.page}/{p.total_pages} (total {p.total})")


def _echo_stats(response: ApiResponse) -> None:
    stats = _unwrap(response)
    for key, value in stats.model_dump(by_alias=True).items():
        typer.echo(f"{key}: {value}")


def _format_client(c: Client) -> str:
    return f"{c.id}\t{c.name}\t{c.url}\t{c.total_workflows} workflows\t${c.total_revenue:,.0f}"


def _format_user(u: User) -> str:
    return f"{u.id}\t{u.name}\t{u.email}\t{u.role}"


def _format_workflow(w: WorkflowData) -> str:
    return f"{w.id}\t{w.workflow_name}\t{w.department}\t{w.status}\t{w.executions} executions"


def _format_stage(w: Workflow) -> str:
    return f"{w.id}\t{w.name}\t{w.status}"


def _format_plan(p: SubscriptionPlan) -> str:
    return f"{p.id}\t{p.name}\t{p.pricing_model}\t{p.clients} clients"


def _format_exception(e: WorkflowException) -> str:
    return f"{e.id}\t{e.workflow_id}\t{e.status}\t{e.message}"


# ----------------------------------------------------------------------
# Clients


@clients_app.command("list")
def clients_list(
    search: Optional[str] = SEARCH,
    sort_by: Optional[str] = SORT_BY,
    order: str = ORDER,
    page: int = PAGE,
    limit: int = LIMIT,
) -> None:
    """List client accounts."""
    _list(get_app().clients, _format_client, search, sort_by, order, page, limit)


@clients_app.command("show")
def clients_show(client_id: str) -> None:
    """Show one client account."""
    client = _unwrap(asyncio.run(get_app().clients.get_by_id(client_id)))
    typer.echo(client.model_dump_json(indent=2, by_alias=True))


@clients_app.command("metrics")
def clients_metrics() -> None:
    """Totals across all clients."""
    _echo_stats(asyncio.run(get_app().clients.get_dashboard_metrics()))


# ----------------------------------------------------------------------
# Users


@users_app.command("list")
def users_list(
    role: str = typer.Option("all", "--role", help="admin, se, client or all"),
    search: Optional[str] = SEARCH,
    sort_by: Optional[str] = SORT_BY,
    order: str = ORDER,
    page: int = PAGE,
    limit: int = LIMIT,
) -> None:
    """List portal users."""
    _list(get_app().users, _format_user, search, sort_by, order, page, limit, role=role)


@users_app.command("stats")
def users_stats() -> None:
    """User counts by role."""
    _echo_stats(asyncio.run(get_app().users.get_stats()))


@users_app.command("create")
def users_create(
    email: str = typer.Option(..., "--email"),
    name: str = typer.Option(..., "--name"),
    role: str = typer.Option("client", "--role"),
) -> None:
    """Add a portal user."""
    payload = {"email": email, "name": name, "role": role}
    try:
        response = asyncio.run(get_app().users.create(payload))
    except ValidationError as exc:
        _fail(f"Invalid user: {exc}", 2)
    user = _unwrap(response)
    typer.echo(_format_user(user))


# ----------------------------------------------------------------------
# Workflows


@workflows_app.command("list")
def workflows_list(
    department: str = typer.Option("all", "--department"),
    status: str = typer.Option("all", "--status", help="active, inactive or all"),
    search: Optional[str] = SEARCH,
    sort_by: Optional[str] = SORT_BY,
    order: str = ORDER,
    page: int = PAGE,
    limit: int = LIMIT,
) -> None:
    """List workflows with their ROI figures."""
    _list(
        get_app().workflows,
        _format_workflow,
        search,
        sort_by,
        order,
        page,
        limit,
        department=department,
        status=status,
    )


@workflows_app.command("toggle")
def workflows_toggle(workflow_id: str) -> None:
    """Activate or deactivate a workflow."""
    workflow = _unwrap(asyncio.run(get_app().workflows.toggle_status(workflow_id)))
    typer.echo(_format_workflow(workflow))


@workflows_app.command("stats")
def workflows_stats() -> None:
    """Workflow ROI totals."""
    _echo_stats(asyncio.run(get_app().workflows.get_stats()))


@workflows_app.command("pipeline")
def workflows_pipeline(
    status: str = typer.Option("all", "--status", help="Pipeline stage or all"),
    department_id: str = typer.Option("all", "--department-id"),
    search: Optional[str] = SEARCH,
    sort_by: Optional[str] = SORT_BY,
    order: str = ORDER,
    page: int = PAGE,
    limit: int = LIMIT,
) -> None:
    """List workflows by delivery pipeline stage."""
    _list(
        get_app().pipeline,
        _format_stage,
        search,
        sort_by,
        order,
        page,
        limit,
        status=status,
        department_id=department_id,
    )


# ----------------------------------------------------------------------
# Plans


@plans_app.command("list")
def plans_list(
    search: Optional[str] = SEARCH,
    sort_by: Optional[str] = SORT_BY,
    order: str = ORDER,
    page: int = PAGE,
    limit: int = LIMIT,
) -> None:
    """List subscription plans."""
    _list(get_app().plans, _format_plan, search, sort_by, order, page, limit)


@plans_app.command("stats")
def plans_stats() -> None:
    """Subscription plan totals."""
    _echo_stats(asyncio.run(get_app().plans.get_stats()))


# ----------------------------------------------------------------------
# Exceptions


@exceptions_app.command("list")
def exceptions_list(
    status: str = typer.Option("all", "--status", help="open, resolved or all"),
    workflow_id: str = typer.Option("all", "--workflow-id"),
    search: Optional[str] = SEARCH,
    sort_by: Optional[str] = SORT_BY,
    order: str = ORDER,
    page: int = PAGE,
    limit: int = LIMIT,
) -> None:
    """List workflow exceptions."""
    _list(
        get_app().exceptions,
        _format_exception,
        search,
        sort_by,
        order,
        page,
        limit,
        status=status,
        workflow_id=workflow_id,
    )


@exceptions_app.command("resolve")
def exceptions_resolve(exception_id: str, resolution: str) -> None:
    """Resolve an open exception."""
    exception = _unwrap(asyncio.run(get_app().exceptions.resolve(exception_id, resolution)))
    typer.echo(_format_exception(exception))


# ----------------------------------------------------------------------
# Dashboard


@dashboard_app.command("metrics")
def dashboard_metrics(
    time_filter: str = typer.Option("itd", "--filter", help="7d, 30d, mtd, qtd, ytd or itd"),
) -> None:
    """Headline metrics with the change against the previous period."""
    metrics = _unwrap(asyncio.run(get_app().dashboard.get_metrics(time_filter)))
    for name in ("total_workflows", "total_exceptions", "time_saved", "revenue", "active_clients"):
        change = metrics.change(name)
        suffix = f" ({change:+.1f}%)" if change is not None else ""
        typer.echo(f"{name}: {getattr(metrics, name)}{suffix}")


# ----------------------------------------------------------------------
# Auth


@auth_app.command("login")
def auth_login(
    email: str,
    password: str = typer.Option(..., "--password", prompt=True, hide_input=True),
) -> None:
    """Sign in; the role follows the email domain."""
    try:
        user = asyncio.run(get_app().auth.login(email, password))
    except AuthenticationError as exc:
        _fail(str(exc), 1)
    typer.echo(f"Signed in as {user.name} ({user.role})")


@auth_app.command("logout")
def auth_logout() -> None:
    """Sign out and forget the stored session."""
    get_app().auth.logout()
    typer.echo("Signed out")


@auth_app.command("whoami")
def auth_whoami() -> None:
    """Show the signed in user and their portal."""
    session = get_app().auth
    if session.user is None:
        _fail("Not signed in", 1)
    typer.echo(f"{session.user.email}\t{session.user.role}\t{session.portal} portal")


if __name__ == "__main__":  # pragma: no cover - manual invocation
    app()
