import logging
from typing import Annotated

from fastapi import APIRouter, Depends, status
from fastapi.security import OAuth2PasswordBearer, OAuth2PasswordRequestForm
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.core.database import get_db
from helpdesk.core.errors import AuthenticationError, ConflictError
from helpdesk.core.policy import Identity
from helpdesk.core.security import create_access_token, decode_access_token, get_password_hash, verify_password
from helpdesk.models.enums import Role
from helpdesk.models.user import User
from helpdesk.repositories import UserRepository
from helpdesk.schemas.user import Token, UserRead, UserRegister

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/token")


def issue_token(user: User) -> dict:
    access_token = create_access_token(
        data={"sub": user.email, "user_id": user.id, "role": Role(user.role).value}
    )
    return {"access_token": access_token, "token_type": "bearer"}


async def get_current_user(token: Annotated[str, Depends(oauth2_scheme)], db: AsyncSession = Depends(get_db)) -> User:
    credentials_exception = AuthenticationError("Could not validate credentials")
    try:
        payload = decode_access_token(token)
        user_id = payload.get("user_id")
        if user_id is None:
            logger.debug("Token missing 'user_id' claim")
            raise credentials_exception
    except JWTError as e:
        logger.debug(f"JWT validation error: {e}")
        raise credentials_exception

    user = await UserRepository(db).get(int(user_id))
    if user is None:
        logger.debug(f"User not found for id: {user_id}")
        raise credentials_exception
    return user


async def get_identity(current_user: User = Depends(get_current_user)) -> Identity:
    """The caller as an explicit value; the role is read from storage, not the token."""
    return Identity.from_user(current_user)


@router.post("/register", response_model=UserRead, status_code=status.HTTP_201_CREATED)
async def register(user_in: UserRegister, db: AsyncSession = Depends(get_db)):
    """Self-service registration, always as a plain USER"""
    users = UserRepository(db)
    if await users.email_taken(user_in.email):
        raise ConflictError("Email already registered")

    user = await users.create(
        email=user_in.email,
        name=user_in.name,
        hashed_password=get_password_hash(user_in.password),
        role=Role.USER,
    )
    await db.commit()
    await db.refresh(user)
    logger.info(f"Registered user {user.id} ({user.email})")
    return user


@router.post("/token", response_model=Token)
async def login_for_access_token(
    form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
    db: AsyncSession = Depends(get_db)
):
    # OAuth2PasswordRequestForm uses 'username' field, but we treat it as email
    user = await UserRepository(db).get_by_email(form_data.username)

    if not user or not verify_password(form_data.password, user.hashed_password):
        raise AuthenticationError("Incorrect email or password")

    return issue_token(user)


@router.get("/me", response_model=UserRead)
async def get_current_user_info(current_user: User = Depends(get_current_user)):
    """Get current user profile information"""
    return current_user
