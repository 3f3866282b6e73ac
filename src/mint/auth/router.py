"""Admin identity endpoint."""

from fastapi import APIRouter, Depends

from mint.auth.dependencies import get_current_user
from mint.auth.schemas import AdminMeResponse
from mint.auth.service import AuthUser, check_admin
from mint.dependencies import get_store
from mint.store import SupabaseStore

router = APIRouter(prefix="/api/admin", tags=["Admin"])


@router.get("/me", response_model=AdminMeResponse)
async def admin_me(
    user: AuthUser = Depends(get_current_user),
    store: SupabaseStore = Depends(get_store),
) -> AdminMeResponse:
    """Whether the caller is an admin, with the reason when not."""
    result = await check_admin(store, user)
    return AdminMeResponse(isAdmin=result.is_admin, detail=result.detail)
