import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.core.database import get_db
from helpdesk.core.errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from helpdesk.core.policy import Capability, Identity
from helpdesk.core.security import get_password_hash
from helpdesk.models.enums import Role
from helpdesk.models.user import normalize_email
from helpdesk.repositories import UserRepository, total_pages
from helpdesk.routers.auth import get_identity
from helpdesk.schemas.common import MessageResponse, Pagination
from helpdesk.schemas.user import (
    TechnicianListResponse,
    TechnicianRead,
    UserCreate,
    UserListItem,
    UserListResponse,
    UserRead,
    UserUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])

ALL_ROLES = "ALL"


def require(identity: Identity, capability: Capability, message: str) -> None:
    if not identity.can(capability):
        raise AuthorizationError(message)


def parse_role_filter(role: Optional[str]) -> Optional[Role]:
    """``ALL`` or no value lists every role."""
    if not role or role == ALL_ROLES:
        return None
    try:
        return Role(role)
    except ValueError:
        choices = ", ".join([ALL_ROLES] + [r.value for r in Role])
        raise ValidationError("Invalid role", details=[{"field": "role", "message": f"Expected one of {choices}"}])


@router.get("", response_model=UserListResponse)
async def list_users(
    search: Optional[str] = None,
    role: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
):
    """List users with their open ticket counts (technicians get read-only access)"""
    require(identity, Capability.LIST_USERS, "You do not have permission to list users")
    role_filter = parse_role_filter(role)

    users_repo = UserRepository(db)
    users, total = await users_repo.find_many(search=search, role=role_filter, page=page, limit=limit)
    open_counts = await users_repo.active_report_counts([user.id for user in users], "reported_by_id")

    items = []
    for user in users:
        item = UserListItem.model_validate(user)
        item.open_tickets_count = open_counts.get(user.id, 0)
        item.has_open_tickets = item.open_tickets_count > 0
        items.append(item)

    return UserListResponse(
        users=items,
        pagination=Pagination(page=page, limit=limit, total=total, total_pages=total_pages(total, limit)),
    )


@router.get("/technicians", response_model=TechnicianListResponse)
async def list_technicians(
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
):
    """Users who can take assignments, with their current workload"""
    require(identity, Capability.LIST_USERS, "You do not have permission to list technicians")

    users_repo = UserRepository(db)
    staff = await users_repo.staff()
    workload = await users_repo.active_report_counts([user.id for user in staff], "assigned_to_id")

    technicians = []
    for user in staff:
        item = TechnicianRead.model_validate(user)
        item.workload = workload.get(user.id, 0)
        technicians.append(item)
    return TechnicianListResponse(technicians=technicians)


@router.post("", response_model=UserRead, status_code=status.HTTP_201_CREATED)
async def create_user(
    user_in: UserCreate,
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
):
    require(identity, Capability.MANAGE_USERS, "Only administrators can create users")

    users_repo = UserRepository(db)
    if await users_repo.email_taken(user_in.email):
        raise ConflictError("A user with this email already exists")

    user = await users_repo.create(
        email=user_in.email,
        name=user_in.name,
        hashed_password=get_password_hash(user_in.password),
        role=user_in.role,
    )
    await db.commit()
    await db.refresh(user)
    logger.info(f"User {user.id} created by admin {identity.user_id}")
    return user


@router.put("/{user_id}", response_model=UserRead)
async def update_user(
    user_id: int,
    update_data: UserUpdate,
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
):
    require(identity, Capability.MANAGE_USERS, "Only administrators can update users")

    users_repo = UserRepository(db)
    user = await users_repo.get(user_id)
    if not user:
        raise NotFoundError("User not found")

    # Check if email is already taken by another user
    if update_data.email and normalize_email(update_data.email) != user.email:
        if await users_repo.email_taken(update_data.email, exclude_id=user.id):
            raise ConflictError("Email already in use")
        user.email = normalize_email(update_data.email)

    if update_data.name:
        user.name = update_data.name
    if update_data.role:
        if update_data.role == Role.USER and Role(user.role) != Role.USER:
            # a plain user can no longer hold assignments
            await users_repo.release_assignments(user.id)
        user.role = update_data.role
    if update_data.password:
        user.hashed_password = get_password_hash(update_data.password)

    await db.commit()
    await db.refresh(user)
    logger.info(f"User {user.id} updated by admin {identity.user_id}")
    return user


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: int,
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
):
    require(identity, Capability.MANAGE_USERS, "Only administrators can delete users")

    users_repo = UserRepository(db)
    user = await users_repo.get(user_id)
    if not user:
        raise NotFoundError("User not found")
    if user.id == identity.user_id:
        raise ConflictError("You cannot delete your own account")
    if await users_repo.has_history(user.id):
        raise ConflictError("User has reports, comments or activity and cannot be deleted")

    await users_repo.delete(user)
    await db.commit()
    logger.info(f"User {user_id} deleted by admin {identity.user_id}")
    return MessageResponse(message="User deleted")
