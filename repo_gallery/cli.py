"""
repo-gallery CLI

Command-line access to the gallery stored in a GitHub repository.

Usage:
    gallery list                      - List catalog entries
    gallery upload PATH -d "text"     - Upload an image
    gallery delete FILENAME           - Delete an image
    gallery reconcile                 - Report orphaned blobs / dangling entries
    gallery serve                     - Start the HTTP API
"""
import asyncio
import logging
import mimetypes
import sys
from pathlib import Path

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from repo_gallery import __version__
from repo_gallery.config import Settings
from repo_gallery.errors import ConfigurationError, GalleryError, describe_error
from repo_gallery.storage.service import GalleryService
from repo_gallery.validation import validate_image_file

console = Console()


def build_service() -> GalleryService:
    """Build the service from environment, exiting on missing configuration."""
    load_dotenv()
    try:
        return GalleryService.from_settings(Settings())
    except ConfigurationError as e:
        console.print(f"[red]✗ {e}[/red]")
        console.print("\nAdd them to .env:")
        console.print('[yellow]echo "GITHUB_TOKEN=ghp_..." >> .env[/yellow]')
        console.print('[yellow]echo "GITHUB_REPO=owner/name" >> .env[/yellow]')
        sys.exit(1)


def run(coro_factory):
    """Run one service call and always close the service afterwards."""
    service = build_service()

    async def _main():
        try:
            return await coro_factory(service)
        finally:
            await service.close()

    return asyncio.run(_main())


@click.group()
@click.version_option(__version__, prog_name="gallery")
@click.option("-v", "--verbose", is_flag=True, help="Log store requests")
def cli(verbose):
    """Manage an image gallery stored in a GitHub repository."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@cli.command("list")
def list_images():
    """List catalog entries, newest first."""
    try:
        catalog = run(lambda service: service.fetch_metadata())
    except GalleryError as e:
        console.print(f"[red]✗ {describe_error(e)}[/red]")
        sys.exit(1)

    if not catalog.images:
        console.print("[yellow]No images yet.[/yellow]")
        return

    table = Table(title=f"{len(catalog.images)} image(s)")
    table.add_column("Filename", style="cyan")
    table.add_column("Description")
    table.add_column("Uploaded", style="dim")
    table.add_column("URL", style="blue")
    for image in catalog.images:
        table.add_row(image.filename, image.description, image.timestamp, image.url)
    console.print(table)


@cli.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("-d", "--description", default="", help="Image description")
def upload(path, description):
    """Upload an image file."""
    data = path.read_bytes()
    declared_type, _ = mimetypes.guess_type(path.name)
    validation = validate_image_file(data, declared_type, len(data))
    if not validation.valid:
        console.print(f"[red]✗ {validation.error}[/red]")
        sys.exit(1)

    with console.status(f"Uploading {path.name}..."):
        result = run(lambda service: service.upload(data, path.name, description))

    if not result.success:
        console.print(f"[red]✗ Upload failed: {result.error}[/red]")
        sys.exit(1)
    console.print(f"[green]✓ Uploaded {result.filename}[/green]")
    console.print(result.url)


@cli.command()
@click.argument("filename")
@click.option("--yes", is_flag=True, help="Skip confirmation")
def delete(filename, yes):
    """Delete an image and its catalog entry."""
    if not yes:
        click.confirm(f"Delete {filename}?", abort=True)

    result = run(lambda service: service.delete(filename))
    if not result.success:
        console.print(f"[red]✗ Delete failed: {result.error}[/red]")
        sys.exit(1)
    console.print(f"[green]✓ Deleted {filename}[/green]")


@cli.command()
def reconcile():
    """Report blobs missing from the catalog and entries missing their blob."""
    try:
        report = run(lambda service: service.reconcile())
    except GalleryError as e:
        console.print(f"[red]✗ {describe_error(e)}[/red]")
        sys.exit(1)

    if report.consistent:
        console.print("[green]✓ Catalog and blobs are consistent[/green]")
        return
    for name in report.orphaned_blobs:
        console.print(f"[yellow]orphaned blob[/yellow]   {name}")
    for name in report.dangling_entries:
        console.print(f"[red]dangling entry[/red]  {name}")
    sys.exit(2)


@cli.command()
@click.option("--host", default="127.0.0.1", help="Bind address")
@click.option("--port", default=8000, type=int, help="Port")
@click.option("--reload", is_flag=True, help="Reload on code changes")
def serve(host, port, reload):
    """Start the HTTP API."""
    import uvicorn

    load_dotenv()
    console.print(f"[bold]repo-gallery[/bold] on http://{host}:{port}")
    uvicorn.run("repo_gallery.main:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    cli()
