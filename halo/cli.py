"""HALO CLI - serve the API and move workflows in and out."""

from __future__ import annotations

import asyncio
import json
import uuid
from pathlib import Path
from typing import Any, Optional

import typer
from rich.console import Console
from rich.table import Table

from . import catalog
from .config import settings
from .errors import HaloError, ImportFormatError, TenantNotFoundError, WorkflowNotFoundError
from .graph.canvas import Canvas
from .notifications import NotificationLog

app = typer.Typer(
    name="halo",
    help="HALO - AI workflow builder",
    no_args_is_help=True,
)
console = Console()


def _output_result(result: dict[str, Any]) -> None:
    console.print_json(json.dumps(result, default=str, indent=2))


@app.command("serve")
def serve(
    port: int = typer.Option(8030, "--port", "-p", help="Port to run on"),
    host: str = typer.Option("127.0.0.1", "--host", help="Host to bind to"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
):
    """Launch the HALO API."""
    import uvicorn

    console.print(f"[bold cyan]Starting HALO at http://{host}:{port}[/bold cyan]")
    uvicorn.run("halo.app:app", host=host, port=port, reload=reload)


@app.command("migrate")
def migrate(revision: str = typer.Argument("head", help="Target revision")):
    """Apply database migrations."""
    from alembic import command
    from alembic.config import Config

    cfg = Config(str(settings.base_dir / "alembic.ini"))
    command.upgrade(cfg, revision)
    console.print(f"[green]Database upgraded to {revision}[/green]")


@app.command("catalog")
def list_catalog(
    integration_type: Optional[str] = typer.Option(
        None, "--type", "-t", help="Only 'trigger' or 'action' integrations"
    ),
):
    """List the integrations a workflow node can use."""
    table = Table(title="Integrations")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Type")
    table.add_column("Category", style="dim")
    table.add_column("Auth")
    for item in catalog.all_integrations(integration_type):
        table.add_row(item.id, item.name, item.type, item.category, "yes" if item.requires_auth else "")
    console.print(table)


@app.command("parse")
def parse(file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Generation JSON")):
    """Materialize an AI generation payload and print the resulting canvas."""
    try:
        payload = json.loads(file.read_text())
    except ValueError as e:
        console.print(f"[red]Error: {file} is not valid JSON ({e})[/red]")
        raise typer.Exit(1)

    notifications = NotificationLog()
    canvas = Canvas(notifier=notifications)
    result = canvas.apply_generation(payload)
    if result is None:
        console.print("[yellow]Payload has no node list; nothing generated[/yellow]")
        raise typer.Exit(1)
    for note in notifications.drain():
        console.print(f"[green]{note.title}[/green] {note.description}")
    _output_result(canvas.to_dict())


async def _export(subdomain: str, workflow_id: uuid.UUID) -> tuple[str, dict[str, Any]]:
    from .database import async_session_factory
    from .services import tenant_svc, transfer_svc, workflow_svc

    async with async_session_factory() as db:
        tenant = await tenant_svc.get_tenant_by_subdomain(db, subdomain.lower())
        if not tenant:
            raise TenantNotFoundError(f"Tenant '{subdomain}' not found")
        workflow = await workflow_svc.get_workflow(db, tenant.id, workflow_id)
        if not workflow:
            raise WorkflowNotFoundError(f"Workflow {workflow_id} not found")
        return transfer_svc.export_filename(workflow.name), transfer_svc.export_workflow(workflow)


async def _import(subdomain: str, content: bytes) -> dict[str, Any]:
    from .database import async_session_factory
    from .services import tenant_svc, transfer_svc

    async with async_session_factory() as db:
        tenant = await tenant_svc.get_tenant_by_subdomain(db, subdomain.lower())
        if not tenant:
            raise TenantNotFoundError(f"Tenant '{subdomain}' not found")
        workflow = await transfer_svc.import_workflow(db, tenant.id, content)
        return {"id": str(workflow.id), "name": workflow.name, "steps": len(workflow.steps)}


@app.command("export")
def export(
    subdomain: str = typer.Argument(..., help="Tenant subdomain"),
    workflow_id: str = typer.Argument(..., help="Workflow ID"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output file or directory"),
):
    """Export a workflow as a portable JSON file."""
    try:
        filename, document = asyncio.run(_export(subdomain, uuid.UUID(workflow_id)))
    except ValueError:
        console.print(f"[red]Error: invalid workflow ID {workflow_id!r}[/red]")
        raise typer.Exit(1)
    except HaloError as e:
        console.print(f"[red]Error: {e.message}[/red]")
        raise typer.Exit(1)

    target = output or Path(filename)
    if target.is_dir():
        target = target / filename
    target.write_text(json.dumps(document, indent=2))
    console.print(f"[green]Exported to {target}[/green]")


@app.command("import")
def import_(
    subdomain: str = typer.Argument(..., help="Tenant subdomain"),
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Exported workflow JSON"),
):
    """Import a workflow file as a new draft."""
    from .services import transfer_svc

    content = file.read_bytes()
    try:
        transfer_svc.validate_import_file(file.name, len(content))
        result = asyncio.run(_import(subdomain, content))
    except (ImportFormatError, TenantNotFoundError) as e:
        console.print(f"[red]Error: {e.message}[/red]")
        raise typer.Exit(1)

    console.print(f"[green]Imported \"{result['name']}\"[/green] ({result['steps']} steps)")
    _output_result(result)


if __name__ == "__main__":
    app()
