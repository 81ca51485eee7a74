"""Command line entry point for browsing popular movies and managing favorites.

Usage:
    favorites-app popular --page 2
    favorites-app favorites add 42
    favorites-app favorites list
    favorites-app favorites remove 42
    favorites-app serve --port 8000
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import click
from rich.console import Console
from rich.table import Table

from favorites_app.errors import FavoritesAppError
from favorites_app.schemas.movie import Movie
from favorites_app.services.dependencies import AppContainer, create_container
from favorites_app.settings import AppSettings
from favorites_app.utils.log_config import configure_logging

console = Console()


@asynccontextmanager
async def _container(ctx: click.Context) -> AsyncIterator[AppContainer]:
    settings: AppSettings = ctx.obj["settings"]
    container = await create_container(
        settings, tmdb_client=ctx.obj.get("tmdb_client")
    )
    try:
        yield container
    finally:
        await container.aclose()


def _run(coro):
    try:
        return asyncio.run(coro)
    except FavoritesAppError as exc:
        raise click.ClickException(str(exc)) from exc


def _movie_table(title: str, movies: list[Movie]) -> Table:
    table = Table(title=title)
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Title")
    table.add_column("Year", no_wrap=True)
    table.add_column("Rating", justify="right", no_wrap=True)
    for movie in movies:
        table.add_row(movie.id, movie.title, movie.year, f"{movie.rating:.1f}")
    return table


@click.group()
@click.option(
    "--log-level",
    default=None,
    help="Override LOG_LEVEL for this invocation (e.g. DEBUG).",
)
@click.pass_context
def cli(ctx: click.Context, log_level: str | None) -> None:
    """Browse TMDB popular movies and keep a local favorites list."""

    ctx.ensure_object(dict)
    settings = ctx.obj.setdefault("settings", AppSettings())
    configure_logging(settings, level=log_level)


@cli.command()
@click.option("--page", default=1, show_default=True, type=click.IntRange(min=1))
@click.pass_context
def popular(ctx: click.Context, page: int) -> None:
    """List one page of popular movies."""

    async def _popular():
        async with _container(ctx) as container:
            return await container.movies.get_popular_page(page)

    result = _run(_popular())
    console.print(
        _movie_table(f"Popular movies (page {result.page}/{result.total_pages})", result.results)
    )


@cli.group()
def favorites() -> None:
    """Manage the local favorites list."""


@favorites.command("list")
@click.pass_context
def list_favorites(ctx: click.Context) -> None:
    """Show every favorite in the order it was added."""

    async def _list():
        async with _container(ctx) as container:
            return await container.store.list_favorites()

    movies = _run(_list())
    if not movies:
        console.print("[yellow]No favorites yet[/yellow]")
        return
    console.print(_movie_table(f"Favorites ({len(movies)})", movies))


@favorites.command("add")
@click.argument("movie_id")
@click.option(
    "--page",
    default=1,
    show_default=True,
    type=click.IntRange(min=1),
    help="Popular page the movie is listed on.",
)
@click.pass_context
def add_favorite(ctx: click.Context, movie_id: str, page: int) -> None:
    """Add a movie from the popular list to favorites."""

    async def _add():
        async with _container(ctx) as container:
            movie = await container.movies.find_popular_movie(movie_id, page=page)
            if movie is not None:
                await container.store.add(movie)
            return movie

    movie = _run(_add())
    if movie is None:
        raise click.ClickException(
            f"Movie {movie_id} is not on popular page {page}"
        )
    console.print(f"[green]✓[/green] Added [bold]{movie.title}[/bold] ({movie.id})")


@favorites.command("remove")
@click.argument("movie_id")
@click.pass_context
def remove_favorite(ctx: click.Context, movie_id: str) -> None:
    """Remove a favorite; unknown ids are ignored."""

    async def _remove():
        async with _container(ctx) as container:
            await container.store.remove(movie_id)

    _run(_remove())
    console.print(f"[green]✓[/green] Removed {movie_id}")


@cli.command()
@click.option("--host", default="127.0.0.1", show_default=True)
@click.option("--port", default=8000, show_default=True, type=int)
@click.option("--reload", is_flag=True, help="Restart on code changes.")
def serve(host: str, port: int, reload: bool) -> None:
    """Run the HTTP API with uvicorn."""

    import uvicorn

    uvicorn.run("favorites_app.main:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    cli()
