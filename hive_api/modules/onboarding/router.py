from fastapi import APIRouter, Depends

from hive_api.core.config import settings
from hive_api.core.dependencies import AuthContext, get_storage, require_provider
from hive_api.modules.users.service import property_count
from hive_api.storage.base import Storage
from .progress import compute_progress
from .schemas import ProgressOut, StepOut

router = APIRouter()


@router.get("/profile/progress", response_model=ProgressOut)
async def profile_progress(ctx: AuthContext = Depends(require_provider), storage: Storage = Depends(get_storage)):
    # recalculado a cada leitura
    progress = compute_progress(
        ctx.user,
        await property_count(storage, ctx.user),
        settings.ONBOARDING_COMPLETE_THRESHOLD,
    )
    next_step = progress.next_step
    return ProgressOut(
        percentage=progress.percentage,
        steps=[StepOut.model_validate(s) for s in progress.steps],
        next_step=StepOut.model_validate(next_step) if next_step else None,
        is_complete=progress.is_complete,
        threshold=progress.threshold,
        dashboard_view=progress.dashboard_view,
    )
