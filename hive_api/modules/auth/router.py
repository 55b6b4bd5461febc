from fastapi import APIRouter, Depends, status

from hive_api.core.dependencies import AuthContext, get_sessions, get_storage, require_auth
from hive_api.core.schemas import SuccessOut
from hive_api.core.sessions import SessionStore
from hive_api.modules.users import service as users
from hive_api.modules.users.schemas import UserEnvelope
from hive_api.storage.base import Storage
from .schemas import AuthOut, LoginRequest, MeOut, RegisterProviderRequest, RegisterRequest, UpgradeRequest

router = APIRouter()


async def _auth_out(storage: Storage, sessions: SessionStore, user) -> AuthOut:
    token = sessions.create(user)
    return AuthOut(user=await users.build_user_view(storage, user), session_token=token)


@router.post("/login", response_model=AuthOut)
async def login(
    payload: LoginRequest,
    storage: Storage = Depends(get_storage),
    sessions: SessionStore = Depends(get_sessions),
):
    user = await users.authenticate(storage, payload.email, payload.password)
    return await _auth_out(storage, sessions, user)


@router.post("/register", response_model=AuthOut, status_code=status.HTTP_201_CREATED)
async def register(
    payload: RegisterRequest,
    storage: Storage = Depends(get_storage),
    sessions: SessionStore = Depends(get_sessions),
):
    user = await users.register_viewer(storage, payload)
    return await _auth_out(storage, sessions, user)


@router.post("/register-provider", response_model=AuthOut, status_code=status.HTTP_201_CREATED)
async def register_provider(
    payload: RegisterProviderRequest,
    storage: Storage = Depends(get_storage),
    sessions: SessionStore = Depends(get_sessions),
):
    user = await users.register_provider(storage, payload)
    return await _auth_out(storage, sessions, user)


@router.post("/upgrade-to-provider", response_model=UserEnvelope)
async def upgrade_to_provider(
    payload: UpgradeRequest,
    ctx: AuthContext = Depends(require_auth),
    storage: Storage = Depends(get_storage),
    sessions: SessionStore = Depends(get_sessions),
):
    provider = await users.upgrade_to_provider(storage, ctx.user.id, payload)
    sessions.update(ctx.token, provider)
    return UserEnvelope(user=await users.build_user_view(storage, provider))


@router.get("/me", response_model=MeOut)
async def me(ctx: AuthContext = Depends(require_auth), storage: Storage = Depends(get_storage)):
    return MeOut(user=await users.build_user_view(storage, ctx.user))


@router.post("/logout", response_model=SuccessOut)
async def logout(ctx: AuthContext = Depends(require_auth), sessions: SessionStore = Depends(get_sessions)):
    sessions.delete(ctx.token)
    return SuccessOut()
