"""Main CLI entry point."""

import importlib
from typing import Any, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from repokit.errors import InvalidArgumentError, RepositoryError, SchemaError
from repokit.schema import mapped_fields

app = typer.Typer(
    name="repokit",
    help="Inspect mapped entities and run paginated searches",
    add_completion=False
)

console = Console()


def load_model(path: str) -> Any:
    """Import a class from a 'package.module:ClassName' path."""
    module_name, sep, attr = path.partition(":")
    if not sep or not module_name or not attr:
        raise typer.BadParameter(
            f"Invalid model path '{path}'. Expected format: package.module:ClassName"
        )
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise typer.BadParameter(f"Cannot import module '{module_name}': {exc}")
    try:
        return getattr(module, attr)
    except AttributeError:
        raise typer.BadParameter(f"Module '{module_name}' has no attribute '{attr}'")


@app.command()
def paginate(
    page: int = typer.Option(1, "--page", "-p", min=0, help="1-based page; 0 disables the offset"),
    page_size: int = typer.Option(10, "--page-size", "-s", min=0, help="Rows per page; 0 means no limit"),
    total: int = typer.Option(..., "--total", "-t", min=0, help="Total row count")
):
    """Show the offset/limit window and page summary for a page."""
    from repokit.pagination import paginate as compute

    descriptor = compute(page, page_size, total)

    table = Table(title="Page")
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")
    for key, value in descriptor.as_dict().items():
        table.add_row(key, str(value))

    console.print(table)


@app.command()
def inspect(
    model_path: str = typer.Argument(..., help="Mapped class, e.g. myapp.models:User")
):
    """List mapped fields and the resolved primary key."""
    from repokit.schema import primary_key_of

    model = load_model(model_path)

    try:
        fields = mapped_fields(model)
        primary_key = primary_key_of(fields, model).storage_name
    except SchemaError as exc:
        console.print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(code=1)

    table = Table(title=f"{model.__name__} fields")
    table.add_column("Attribute", style="cyan")
    table.add_column("Column", style="green")
    table.add_column("Primary Key")
    for f in fields:
        table.add_row(f.attribute, f.storage_name, "yes" if f.is_primary_key else "")

    console.print(table)
    console.print(f"Primary key: [bold]{primary_key}[/bold]")


@app.command()
def search(
    model_path: str = typer.Argument(..., help="Mapped class, e.g. myapp.models:User"),
    page: int = typer.Option(1, "--page", "-p", min=0, help="1-based page; 0 disables the offset"),
    page_size: Optional[int] = typer.Option(None, "--page-size", "-s", min=0, help="Rows per page"),
    where: Optional[str] = typer.Option(None, "--where", "-w", help="Raw SQL filter, e.g. \"name LIKE 'a%'\"")
):
    """Run a paginated search against the configured database."""
    from repokit.database import get_session
    from repokit.repository import Repository, RepositoryConfig

    model = load_model(model_path)
    criteria = (where,) if where else ()

    try:
        with get_session() as session:
            repo = Repository(session, model, RepositoryConfig.from_settings())
            result = repo.search(page, *criteria, page_size=page_size)
            columns = mapped_fields(model)

            table = Table(title=f"{model.__name__} page {result.page}")
            for f in columns:
                table.add_column(f.storage_name, style="cyan" if f.is_primary_key else None)
            for entity in result.entities:
                table.add_row(*[str(getattr(entity, f.attribute)) for f in columns])
    except (InvalidArgumentError, SchemaError) as exc:
        console.print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(code=1)
    except RepositoryError as exc:
        console.print(f"[red]Search failed:[/red] {escape(str(exc))}")
        raise typer.Exit(code=2)

    console.print(table)
    console.print(
        f"{len(result.entities)} of {result.total_count} rows, "
        f"page {result.page}/{result.total_pages} "
        f"(next: {'yes' if result.has_next_page else 'no'}, "
        f"prev: {'yes' if result.has_prev_page else 'no'})"
    )


def main():
    app()


if __name__ == "__main__":
    main()
