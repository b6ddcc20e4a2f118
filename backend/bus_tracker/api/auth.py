"""Authentication endpoints: driver registration, login, admin accounts."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from bus_tracker.api.deps import AuthUser, require_admin
from bus_tracker.api.driver import driver_info
from bus_tracker.core.security import (
    ROLE_ADMIN,
    ROLE_DRIVER,
    create_token,
    hash_password,
    validate_credentials,
    verify_password,
)
from bus_tracker.db.session import get_session
from bus_tracker.models.tables import Bus, User
from bus_tracker.schemas.auth import (
    AuthResponse,
    DriverInfo,
    LoginRequest,
    RegisterRequest,
    UserCreated,
    UserInfo,
)
from bus_tracker.schemas.common import MessageResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


def user_info(user: User) -> UserInfo:
    return UserInfo(id=user.id, name=user.name, phone=user.phone, role=user.role)


async def _create_user(session: AsyncSession, body: RegisterRequest, role: str) -> User:
    if not body.name or not body.phone or not body.password:
        raise HTTPException(status_code=400, detail="Name, phone, and password are required")
    error = validate_credentials(body.phone, body.password)
    if error:
        raise HTTPException(status_code=400, detail=error)

    existing = await session.execute(select(User.id).where(User.phone == body.phone))
    if existing.scalar_one_or_none() is not None:
        raise HTTPException(status_code=400, detail="This phone number is already registered.")

    user = User(
        name=body.name.strip(),
        phone=body.phone,
        password_hash=hash_password(body.password),
        role=role,
    )
    session.add(user)
    await session.commit()
    logger.info("Registered %s %s", role, user.id)
    return user


@router.post("/register", response_model=AuthResponse, status_code=201)
async def register(body: RegisterRequest, session: AsyncSession = Depends(get_session)):
    """Register a driver account."""
    user = await _create_user(session, body, ROLE_DRIVER)
    return AuthResponse(
        token=create_token(user.id, user.role),
        user=DriverInfo(**user_info(user).model_dump()),
    )


@router.post("/login", response_model=AuthResponse)
async def login(body: LoginRequest, session: AsyncSession = Depends(get_session)):
    if not body.phone or not body.password:
        raise HTTPException(status_code=400, detail="Phone and password are required")

    result = await session.execute(
        select(User)
        .where(User.phone == body.phone)
        .options(selectinload(User.assigned_bus).options(
            selectinload(Bus.route), selectinload(Bus.driver),
        ))
    )
    user = result.scalar_one_or_none()
    if user is None:
        raise HTTPException(status_code=400, detail="No account found with this phone number.")
    if not verify_password(body.password, user.password_hash):
        raise HTTPException(status_code=400, detail="Incorrect password.")

    return AuthResponse(token=create_token(user.id, user.role), user=driver_info(user))


@router.post("/setup", response_model=AuthResponse, status_code=201)
async def setup_first_admin(body: RegisterRequest, session: AsyncSession = Depends(get_session)):
    """Create the first admin; refused once any admin exists."""
    existing_admin = await session.execute(select(User.id).where(User.role == ROLE_ADMIN).limit(1))
    if existing_admin.scalar_one_or_none() is not None:
        raise HTTPException(
            status_code=403,
            detail="Setup already complete. Use /create-admin with an admin token to add more admins.",
        )
    admin = await _create_user(session, body, ROLE_ADMIN)
    return AuthResponse(
        token=create_token(admin.id, admin.role),
        user=DriverInfo(**user_info(admin).model_dump()),
        message="First admin created successfully!",
    )


@router.post("/create-admin", response_model=UserCreated, status_code=201)
async def create_admin(
    body: RegisterRequest,
    session: AsyncSession = Depends(get_session),
    _: AuthUser = Depends(require_admin),
):
    admin = await _create_user(session, body, ROLE_ADMIN)
    return UserCreated(message=f'Admin "{admin.name}" created successfully.', user=user_info(admin))


@router.get("/admins", response_model=list[UserInfo])
async def list_admins(
    session: AsyncSession = Depends(get_session),
    _: AuthUser = Depends(require_admin),
):
    result = await session.execute(select(User).where(User.role == ROLE_ADMIN).order_by(User.name))
    return [user_info(u) for u in result.scalars().all()]


@router.delete("/admins/{admin_id}", response_model=MessageResponse)
async def delete_admin(
    admin_id: int,
    session: AsyncSession = Depends(get_session),
    current: AuthUser = Depends(require_admin),
):
    if admin_id == current.id:
        raise HTTPException(status_code=400, detail="You cannot delete your own admin account.")
    result = await session.execute(
        select(User).where(User.id == admin_id, User.role == ROLE_ADMIN)
    )
    admin = result.scalar_one_or_none()
    if admin is None:
        raise HTTPException(status_code=404, detail="Admin not found.")
    name = admin.name
    await session.delete(admin)
    await session.commit()
    logger.info("Deleted admin %s", admin_id)
    return MessageResponse(message=f'Admin "{name}" deleted.')
