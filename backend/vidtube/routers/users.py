import logging

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, Response, UploadFile, status
from pydantic import EmailStr
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.config import Settings, get_settings
from vidtube.db.session import get_db
from vidtube.db.repositories import user_repo, video_repo, subscription_repo
from vidtube.dependencies import (
    ACCESS_TOKEN_COOKIE,
    REFRESH_TOKEN_COOKIE,
    get_current_user,
    get_media_storage,
)
from vidtube.models.user import User
from vidtube.schemas.auth import (
    ChangePasswordRequest,
    LoginRequest,
    LoginResponse,
    RefreshTokenRequest,
    TokenPair,
)
from vidtube.schemas.common import ApiResponse, api_response
from vidtube.schemas.user import ChannelProfileResponse, UpdateAccountRequest, UserResponse
from vidtube.schemas.video import VideoResponse
from vidtube.services.auth_service import (
    create_access_token,
    create_refresh_token,
    decode_refresh_token,
    hash_password,
    parse_subject,
    verify_password,
)
from vidtube.services.media_service import MediaStorage, MediaStorageError

logger = logging.getLogger(__name__)

router = APIRouter()


def _set_auth_cookies(response: Response, settings: Settings, access_token: str, refresh_token: str) -> None:
    for name, value, minutes in (
        (ACCESS_TOKEN_COOKIE, access_token, settings.access_token_expire_minutes),
        (REFRESH_TOKEN_COOKIE, refresh_token, settings.refresh_token_expire_minutes),
    ):
        response.set_cookie(
            key=name,
            value=value,
            max_age=minutes * 60,
            httponly=True,
            secure=settings.cookie_secure,
            samesite="lax",
        )


def _clear_auth_cookies(response: Response, settings: Settings) -> None:
    for name in (ACCESS_TOKEN_COOKIE, REFRESH_TOKEN_COOKIE):
        response.delete_cookie(name, httponly=True, secure=settings.cookie_secure, samesite="lax")


async def _issue_tokens(db: AsyncSession, user: User, settings: Settings) -> TokenPair:
    access_token = create_access_token(user, settings)
    refresh_token = create_refresh_token(user, settings)
    # The stored value is the only refresh token that will be accepted
    await user_repo.set_refresh_token(db, user, refresh_token)
    return TokenPair(access_token=access_token, refresh_token=refresh_token)


@router.post("/register", response_model=ApiResponse[UserResponse], status_code=status.HTTP_201_CREATED)
async def register(
    full_name: str = Form(..., alias="fullName"),
    email: EmailStr = Form(...),
    username: str = Form(...),
    password: str = Form(...),
    avatar: UploadFile | None = File(None),
    cover_image: UploadFile | None = File(None, alias="coverImage"),
    db: AsyncSession = Depends(get_db),
    media: MediaStorage = Depends(get_media_storage),
):
    if any(not field.strip() for field in (full_name, email, username, password)):
        raise HTTPException(status_code=400, detail="All fields are required")

    if await user_repo.get_user_by_username(db, username) or await user_repo.get_user_by_email(db, email):
        raise HTTPException(status_code=409, detail="User already exists")

    if avatar is None or not avatar.filename:
        raise HTTPException(status_code=400, detail="Avatar file is required")

    try:
        avatar_asset = await media.upload_file(avatar, resource_type="image")
        cover_asset = None
        if cover_image is not None and cover_image.filename:
            cover_asset = await media.upload_file(cover_image, resource_type="image")
    except MediaStorageError as e:
        raise HTTPException(status_code=500, detail=f"Error uploading images: {e}")

    try:
        user = await user_repo.create_user(
            db,
            username=username,
            email=email,
            full_name=full_name,
            password_hash=await hash_password(password),
            avatar=avatar_asset.url,
            cover_image=cover_asset.url if cover_asset else None,
        )
        await db.commit()
    except IntegrityError:
        # Lost a race with a concurrent registration for the same username or email
        await db.rollback()
        for asset in (avatar_asset, cover_asset):
            if asset:
                try:
                    await media.destroy_url(asset.url, resource_type="image")
                except MediaStorageError:
                    logger.warning(f"Orphaned upload {asset.url} was not removed from the media host")
        raise HTTPException(status_code=409, detail="User already exists")
    logger.info(f"Registered user {user.username} ({user.id})")
    return api_response(UserResponse.model_validate(user), "User created successfully", status.HTTP_201_CREATED)


@router.post("/login", response_model=ApiResponse[LoginResponse])
async def login(
    body: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    user = await user_repo.find_user_by_login(db, body.username, body.email)
    if not user:
        raise HTTPException(status_code=404, detail="User does not exist")
    if not await verify_password(body.password, user.password_hash):
        logger.warning(f"Failed login for {user.username}")
        raise HTTPException(status_code=401, detail="Invalid user credentials")

    tokens = await _issue_tokens(db, user, settings)
    await db.commit()
    _set_auth_cookies(response, settings, tokens.access_token, tokens.refresh_token)
    data = LoginResponse(
        user=UserResponse.model_validate(user),
        access_token=tokens.access_token,
        refresh_token=tokens.refresh_token,
    )
    return api_response(data, "User logged in successfully")


@router.post("/logout", response_model=ApiResponse[dict])
async def logout(
    response: Response,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
    current_user: User = Depends(get_current_user),
):
    await user_repo.set_refresh_token(db, current_user, None)
    await db.commit()
    _clear_auth_cookies(response, settings)
    return api_response({}, "User logged out successfully")


@router.post("/refresh-token", response_model=ApiResponse[TokenPair])
async def refresh_access_token(
    request: Request,
    response: Response,
    body: RefreshTokenRequest | None = None,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    incoming = request.cookies.get(REFRESH_TOKEN_COOKIE) or (body.refresh_token if body else None)
    if not incoming:
        raise HTTPException(status_code=401, detail="Unauthorized access")

    payload = decode_refresh_token(incoming, settings)
    uid = parse_subject(payload) if payload else None
    if uid is None:
        raise HTTPException(status_code=401, detail="Invalid refresh token")

    user = await user_repo.get_user_by_id(db, uid)
    if not user:
        raise HTTPException(status_code=404, detail="Invalid refresh token")
    if user.refresh_token != incoming:
        logger.warning(f"Stale refresh token presented for user {user.id}")
        raise HTTPException(status_code=401, detail="Refresh token is expired or used")

    tokens = await _issue_tokens(db, user, settings)
    await db.commit()
    _set_auth_cookies(response, settings, tokens.access_token, tokens.refresh_token)
    return api_response(tokens, "Access token refreshed successfully")


@router.post("/change-password", response_model=ApiResponse[dict])
async def change_password(
    body: ChangePasswordRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if not body.old_password or not body.new_password:
        raise HTTPException(status_code=400, detail="All fields are required")
    if not await verify_password(body.old_password, current_user.password_hash):
        raise HTTPException(status_code=400, detail="Invalid old password")
    await user_repo.update_user(db, current_user, password_hash=await hash_password(body.new_password))
    await db.commit()
    return api_response({}, "Password changed successfully")


@router.get("/current-user", response_model=ApiResponse[UserResponse])
async def get_current_user_profile(current_user: User = Depends(get_current_user)):
    return api_response(UserResponse.model_validate(current_user), "User fetched successfully")


@router.patch("/update-account", response_model=ApiResponse[UserResponse])
async def update_account(
    body: UpdateAccountRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    other = await user_repo.get_user_by_email(db, body.email)
    if other and other.id != current_user.id:
        raise HTTPException(status_code=409, detail="Email already in use")
    user = await user_repo.update_user(db, current_user, full_name=body.full_name, email=body.email)
    await db.commit()
    return api_response(UserResponse.model_validate(user), "User details updated successfully")


async def _replace_image(
    db: AsyncSession,
    media: MediaStorage,
    user: User,
    field: str,
    file: UploadFile | None,
    label: str,
) -> User:
    if file is None or not file.filename:
        raise HTTPException(status_code=400, detail=f"{label} file is missing")
    try:
        asset = await media.upload_file(file, resource_type="image")
    except MediaStorageError as e:
        raise HTTPException(status_code=500, detail=f"Error uploading {label.lower()}: {e}")

    old_url = getattr(user, field)
    user = await user_repo.update_user(db, user, **{field: asset.url})
    await db.commit()

    if old_url:
        try:
            await media.destroy_url(old_url, resource_type="image")
        except MediaStorageError:
            logger.warning(f"Old {label.lower()} {old_url} was not removed from the media host")
    return user


@router.patch("/avatar", response_model=ApiResponse[UserResponse])
async def update_avatar(
    avatar: UploadFile | None = File(None),
    db: AsyncSession = Depends(get_db),
    media: MediaStorage = Depends(get_media_storage),
    current_user: User = Depends(get_current_user),
):
    user = await _replace_image(db, media, current_user, "avatar", avatar, "Avatar")
    return api_response(UserResponse.model_validate(user), "Avatar updated successfully")


@router.patch("/cover-image", response_model=ApiResponse[UserResponse])
async def update_cover_image(
    cover_image: UploadFile | None = File(None, alias="coverImage"),
    db: AsyncSession = Depends(get_db),
    media: MediaStorage = Depends(get_media_storage),
    current_user: User = Depends(get_current_user),
):
    user = await _replace_image(db, media, current_user, "cover_image", cover_image, "Cover image")
    return api_response(UserResponse.model_validate(user), "Cover image updated successfully")


@router.get("/c/{username}", response_model=ApiResponse[ChannelProfileResponse])
async def get_channel_profile(
    username: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if not username.strip():
        raise HTTPException(status_code=400, detail="Username is missing")
    channel = await user_repo.get_user_by_username(db, username)
    if not channel:
        raise HTTPException(status_code=404, detail="Channel not found")

    subscribers, subscribed_to = await user_repo.get_channel_counts(db, channel.id)
    profile = ChannelProfileResponse(
        id=channel.id,
        username=channel.username,
        email=channel.email,
        full_name=channel.full_name,
        avatar=channel.avatar,
        cover_image=channel.cover_image,
        subscribers_count=subscribers,
        channels_subscribed_to_count=subscribed_to,
        is_subscribed=await subscription_repo.is_subscribed(db, current_user.id, channel.id),
    )
    return api_response(profile, "User channel fetched successfully")


@router.get("/history", response_model=ApiResponse[list[VideoResponse]])
async def get_watch_history(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    videos = await video_repo.get_watch_history(db, current_user.id)
    return api_response(
        [VideoResponse.model_validate(v) for v in videos], "Watch history fetched successfully"
    )
