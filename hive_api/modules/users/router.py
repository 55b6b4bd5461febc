from fastapi import APIRouter, Depends

from hive_api.core.dependencies import (
    AuthContext,
    get_sessions,
    get_storage,
    require_auth,
    require_business_plan,
    require_provider,
)
from hive_api.core.sessions import SessionStore
from hive_api.storage.base import Storage
from . import service
from .schemas import CategoriesUpdate, ProfileUpdate, ProviderProfileUpdate, UserEnvelope, UserOut

router = APIRouter()


@router.get("/profile", response_model=UserOut)
async def get_profile(ctx: AuthContext = Depends(require_auth), storage: Storage = Depends(get_storage)):
    return await service.build_user_view(storage, ctx.user)


@router.put("/profile", response_model=UserEnvelope)
async def update_profile(
    payload: ProfileUpdate,
    ctx: AuthContext = Depends(require_auth),
    storage: Storage = Depends(get_storage),
    sessions: SessionStore = Depends(get_sessions),
):
    user = await service.update_profile(storage, ctx.user, payload)
    sessions.update(ctx.token, user)
    return UserEnvelope(user=await service.build_user_view(storage, user))


@router.put("/user/categories", response_model=UserEnvelope)
async def update_categories(
    payload: CategoriesUpdate,
    ctx: AuthContext = Depends(require_business_plan),
    storage: Storage = Depends(get_storage),
    sessions: SessionStore = Depends(get_sessions),
):
    user = await service.update_categories(storage, ctx.user, payload.category_ids)
    sessions.update(ctx.token, user)
    return UserEnvelope(user=await service.build_user_view(storage, user))


@router.put("/provider/profile", response_model=UserEnvelope)
async def update_provider_profile(
    payload: ProviderProfileUpdate,
    ctx: AuthContext = Depends(require_provider),
    storage: Storage = Depends(get_storage),
    sessions: SessionStore = Depends(get_sessions),
):
    user = await service.update_provider_profile(storage, ctx.user, payload)
    sessions.update(ctx.token, user)
    return UserEnvelope(user=await service.build_user_view(storage, user))
