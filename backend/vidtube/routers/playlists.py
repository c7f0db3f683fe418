from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.db.session import get_db
from vidtube.db.repositories import playlist_repo, video_repo
from vidtube.dependencies import get_current_user
from vidtube.models.playlist import Playlist
from vidtube.models.user import User
from vidtube.schemas.common import ApiResponse, api_response
from vidtube.schemas.playlist import PlaylistCreate, PlaylistPage, PlaylistResponse, PlaylistUpdate
from vidtube.services.permissions import ensure_owner

router = APIRouter()


async def _get_owned_playlist(db: AsyncSession, playlist_id: UUID, user: User) -> Playlist:
    playlist = await playlist_repo.get_playlist_by_id(db, playlist_id)
    if not playlist:
        raise HTTPException(status_code=404, detail="Playlist not found")
    ensure_owner(user.id, playlist.owner_id, "You are not allowed to modify this playlist")
    return playlist


@router.post("", response_model=ApiResponse[PlaylistResponse], status_code=status.HTTP_201_CREATED)
async def create_playlist(
    body: PlaylistCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    playlist = await playlist_repo.create_playlist(db, current_user.id, body.name, body.description)
    await db.commit()
    return api_response(
        PlaylistResponse.model_validate(playlist), "Playlist created successfully", status.HTTP_201_CREATED
    )


@router.get("/user/{user_id}", response_model=ApiResponse[PlaylistPage])
async def get_user_playlists(
    user_id: UUID,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    query: str | None = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    playlists, total = await playlist_repo.get_playlists_by_owner(
        db, user_id, page=page, limit=limit, query=query.strip() if query else None
    )
    data = PlaylistPage(
        playlists=[PlaylistResponse.model_validate(p) for p in playlists],
        total=total,
        page=page,
        limit=limit,
    )
    return api_response(data, "Playlists fetched successfully")


@router.get("/{playlist_id}", response_model=ApiResponse[PlaylistResponse])
async def get_playlist(
    playlist_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    playlist = await playlist_repo.get_playlist_by_id(db, playlist_id)
    if not playlist:
        raise HTTPException(status_code=404, detail="Playlist not found")
    return api_response(PlaylistResponse.model_validate(playlist), "Playlist fetched successfully")


@router.patch("/add/{video_id}/{playlist_id}", response_model=ApiResponse[PlaylistResponse])
async def add_video_to_playlist(
    video_id: UUID,
    playlist_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    playlist = await _get_owned_playlist(db, playlist_id, current_user)
    if not await video_repo.get_video_by_id(db, video_id):
        raise HTTPException(status_code=404, detail="Video not found")
    if playlist_repo.contains_video(playlist, video_id):
        raise HTTPException(status_code=400, detail="Video already exists in playlist")
    playlist = await playlist_repo.add_video(db, playlist, video_id)
    await db.commit()
    return api_response(PlaylistResponse.model_validate(playlist), "Video added to playlist successfully")


@router.patch("/remove/{video_id}/{playlist_id}", response_model=ApiResponse[PlaylistResponse])
async def remove_video_from_playlist(
    video_id: UUID,
    playlist_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    playlist = await _get_owned_playlist(db, playlist_id, current_user)
    if not playlist_repo.contains_video(playlist, video_id):
        raise HTTPException(status_code=400, detail="Video does not exist in playlist")
    playlist = await playlist_repo.remove_video(db, playlist, video_id)
    await db.commit()
    return api_response(PlaylistResponse.model_validate(playlist), "Video removed from playlist successfully")


@router.patch("/{playlist_id}", response_model=ApiResponse[PlaylistResponse])
async def update_playlist(
    playlist_id: UUID,
    body: PlaylistUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    playlist = await _get_owned_playlist(db, playlist_id, current_user)
    updates = {k: v for k, v in body.model_dump(exclude_unset=True).items() if v}
    if not updates:
        raise HTTPException(status_code=400, detail="Name or description is required")
    playlist = await playlist_repo.update_playlist(db, playlist, **updates)
    await db.commit()
    return api_response(PlaylistResponse.model_validate(playlist), "Playlist updated successfully")


@router.delete("/{playlist_id}", response_model=ApiResponse[None])
async def delete_playlist(
    playlist_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    playlist = await _get_owned_playlist(db, playlist_id, current_user)
    await playlist_repo.delete_playlist(db, playlist)
    await db.commit()
    return api_response(None, "Playlist deleted successfully")
