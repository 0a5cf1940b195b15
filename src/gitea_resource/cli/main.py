import sys
from pathlib import Path
from typing import List, Optional

import typer
from pydantic import TypeAdapter
from rich.console import Console
from rich.markup import escape

from ..config import Settings, configure_logging, load_settings
from ..domain.errors import LocalFileIOError, ResourceError
from ..domain.models import CheckParams, FetchParams, PublishParams, Source, Version
from ..registry.client import GiteaClient
from ..services.check import CheckService
from ..services.fetch import FetchService
from ..services.publish import PublishService
from ..ui.progress import ProgressManager

app = typer.Typer(add_completion=False, no_args_is_help=True)

# stdout is reserved for the JSON result
console = Console(stderr=True)

PARAMS_HELP = "JSON params file, or '-' to read from stdin (the default)"


def get_client(source: Source, settings: Settings) -> GiteaClient:
    return GiteaClient.from_source(source, settings)


def read_params(params: Optional[str]) -> str:
    if params is None or params == "-":
        return sys.stdin.read()
    try:
        return Path(params).read_text()
    except OSError as e:
        raise LocalFileIOError(f"Could not read params file '{params}': {e}", cause=e) from e


def fail(error: ResourceError):
    console.print(f"[red]Error:[/red] {escape(str(error))}")
    raise typer.Exit(code=1)


@app.callback()
def main_callback(ctx: typer.Context):
    """concourse resource for Gitea generic packages."""
    try:
        settings = load_settings()
    except ResourceError as e:
        fail(e)
    configure_logging(settings.log_level, console)
    ctx.obj = settings


@app.command()
def check(
    ctx: typer.Context,
    params: Optional[str] = typer.Argument(None, help=PARAMS_HELP),
):
    """list package versions newer than the given one, oldest first."""
    try:
        check_params = CheckParams.parse(read_params(params))
        with get_client(check_params.source, ctx.obj) as client:
            versions = CheckService(client).check(check_params)
    except ResourceError as e:
        fail(e)

    typer.echo(TypeAdapter(List[Version]).dump_json(versions).decode())


@app.command("in")
def get(
    ctx: typer.Context,
    destination: Path = typer.Argument(..., help="directory to download the package files into"),
    params: Optional[str] = typer.Argument(None, help=PARAMS_HELP),
):
    """download every file of a package version."""
    try:
        fetch_params = FetchParams.parse(read_params(params))
        try:
            destination.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise LocalFileIOError(f"Could not create destination '{destination}': {e}", cause=e) from e

        with get_client(fetch_params.source, ctx.obj) as client:
            service = FetchService(client, ProgressManager(console))
            output = service.fetch(fetch_params, destination)
    except ResourceError as e:
        fail(e)

    typer.echo(output.model_dump_json())


@app.command("out")
def put(
    ctx: typer.Context,
    sources: Path = typer.Argument(..., help="directory the files to upload are relative to"),
    params: Optional[str] = typer.Argument(None, help=PARAMS_HELP),
):
    """upload files as a package version, skipping files that already exist."""
    try:
        publish_params = PublishParams.parse(read_params(params))
        with get_client(publish_params.source, ctx.obj) as client:
            service = PublishService(client, ProgressManager(console))
            output = service.publish(publish_params, sources)
    except ResourceError as e:
        fail(e)

    typer.echo(output.model_dump_json())


def main():
    app()


if __name__ == "__main__":
    main()
