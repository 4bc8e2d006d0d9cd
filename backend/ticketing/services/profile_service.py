"""
Profile directory: the user_profiles rows bookings and events point at.
"""

import uuid

from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from ticketing.core.exceptions import NotFound
from ticketing.core.logging import get_logger
from ticketing.db.base import utcnow
from ticketing.db.session import guarded
from ticketing.models.profile import UserProfile
from ticketing.schemas.profile import ProfileUpdate
from ticketing.services.access_policy import Action, Principal, Resource, authorize

logger = get_logger(__name__)


def _insert(db: AsyncSession):
    if db.get_bind().dialect.name == "postgresql":
        return postgresql.insert(UserProfile)
    return sqlite.insert(UserProfile)


async def ensure_profile(db: AsyncSession, principal: Principal) -> None:
    """
    Make sure the principal has a profile row, inside the caller's transaction.
    Concurrent first requests from the same user are fine: the insert is a
    no-op on conflict.
    """
    stmt = _insert(db).values(
        id=principal.user_id,
        email=principal.email or "",
        full_name="",
        is_admin=principal.is_admin,
        created_at=utcnow(),
        updated_at=utcnow(),
    ).on_conflict_do_nothing(index_elements=[UserProfile.id])
    await db.execute(stmt)


async def upsert_own_profile(db: AsyncSession, principal: Principal, data: ProfileUpdate) -> UserProfile:
    """Create or update the caller's profile. `is_admin` always mirrors the token."""
    authorize(principal, Resource.PROFILE, Action.UPDATE, owner_id=principal.user_id)

    async with guarded(db, "upsert_profile"):
        insert_stmt = _insert(db).values(
            id=principal.user_id,
            email=data.email,
            full_name=data.full_name,
            is_admin=principal.is_admin,
            created_at=utcnow(),
            updated_at=utcnow(),
        )
        stmt = insert_stmt.on_conflict_do_update(
            index_elements=[UserProfile.id],
            set_={
                "email": insert_stmt.excluded.email,
                "full_name": insert_stmt.excluded.full_name,
                "is_admin": insert_stmt.excluded.is_admin,
                "updated_at": insert_stmt.excluded.updated_at,
            },
        )
        await db.execute(stmt)
        await db.commit()

    logger.info("profile_saved", user_id=str(principal.user_id))
    return await get_profile(db, principal, principal.user_id)


async def get_profile(db: AsyncSession, principal: Principal, user_id: uuid.UUID) -> UserProfile:
    authorize(principal, Resource.PROFILE, Action.READ, owner_id=user_id)

    async with guarded(db, "get_profile"):
        result = await db.execute(
            select(UserProfile)
            .where(UserProfile.id == user_id)
            .execution_options(populate_existing=True)
        )
        profile = result.scalar_one_or_none()

    if not profile:
        raise NotFound("profile", user_id)
    return profile
