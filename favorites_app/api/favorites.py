"""FastAPI router exposing the favorites store, including live event streams."""

from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import APIRouter, Depends, HTTPException, Response, status
from fastapi.responses import StreamingResponse

from favorites_app.schemas.favorites import FavoritesListResponse, FavoriteStatus
from favorites_app.schemas.movie import Movie
from favorites_app.services.dependencies import get_favorites_store
from favorites_app.services.favorites import FavoritesStore

router = APIRouter()


def _sse(payload: str) -> str:
    return f"data: {payload}\n\n"


async def favorites_events(store: FavoritesStore) -> AsyncIterator[str]:
    """Server-sent events carrying the full favorites list after each change."""

    async with store.all() as favorites:
        async for movies in favorites:
            body = FavoritesListResponse(total=len(movies), favorites=movies)
            yield _sse(body.model_dump_json())


async def membership_events(store: FavoritesStore, movie_id: str) -> AsyncIterator[str]:
    """Server-sent events carrying one movie's membership after each flip."""

    async with store.is_favorite(movie_id) as membership:
        async for is_favorite in membership:
            body = FavoriteStatus(movie_id=movie_id, is_favorite=is_favorite)
            yield _sse(body.model_dump_json())


@router.get("", response_model=FavoritesListResponse)
async def list_favorites(
    store: FavoritesStore = Depends(get_favorites_store),
) -> FavoritesListResponse:
    favorites = await store.list_favorites()
    return FavoritesListResponse(total=len(favorites), favorites=favorites)


@router.get("/stream")
async def stream_favorites(
    store: FavoritesStore = Depends(get_favorites_store),
) -> StreamingResponse:
    return StreamingResponse(favorites_events(store), media_type="text/event-stream")


@router.put("/{movie_id}", response_model=Movie)
async def add_favorite(
    movie_id: str,
    payload: Movie,
    store: FavoritesStore = Depends(get_favorites_store),
) -> Movie:
    """Store ``payload`` as a favorite, replacing an earlier copy if present."""

    if payload.id != movie_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Movie id in the body does not match the URL",
        )
    await store.add(payload)
    return payload


@router.delete("/{movie_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_favorite(
    movie_id: str,
    store: FavoritesStore = Depends(get_favorites_store),
) -> Response:
    await store.remove(movie_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{movie_id}/status", response_model=FavoriteStatus)
async def favorite_status(
    movie_id: str,
    store: FavoritesStore = Depends(get_favorites_store),
) -> FavoriteStatus:
    return FavoriteStatus(movie_id=movie_id, is_favorite=await store.contains(movie_id))


@router.get("/{movie_id}/stream")
async def stream_favorite_status(
    movie_id: str,
    store: FavoritesStore = Depends(get_favorites_store),
) -> StreamingResponse:
    return StreamingResponse(
        membership_events(store, movie_id), media_type="text/event-stream"
    )
