"""
Profile endpoints for the authenticated caller.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ticketing.core.security import get_current_principal
from ticketing.db.session import get_db
from ticketing.schemas.profile import ProfileResponse, ProfileUpdate
from ticketing.services.access_policy import Principal
from ticketing.services.profile_service import get_profile, upsert_own_profile

router = APIRouter(prefix="/profiles", tags=["Profiles"])


@router.put("/me", response_model=ProfileResponse)
async def save_my_profile(
    data: ProfileUpdate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """Create or update the caller's profile. The admin flag comes from the token."""
    return await upsert_own_profile(db, principal, data)


@router.get("/me", response_model=ProfileResponse)
async def read_my_profile(
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    return await get_profile(db, principal, principal.user_id)
