"""
Receipegram Authentication Service
JWT issuing/verification, password hashing, registration and login
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy import select, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from core.config import get_settings
from core.exceptions import AuthError, NotFoundError, ValidationError
from models.users import User
from schemas.auth_schemas import UserCreate, UserLogin, UserUpdate

settings = get_settings()
logger = structlog.get_logger()


class AuthenticationError(Exception):
    """Token could not be verified or decoded"""
    pass


@dataclass(frozen=True)
class Identity:
    """Caller identity decoded from a verified access token"""
    id: int
    username: str
    email: str


class AuthService:
    def __init__(self):
        self.pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

    # Read on every call so tests and reloads can swap the secret
    @property
    def secret_key(self) -> str:
        return settings.JWT_SECRET_KEY

    @property
    def algorithm(self) -> str:
        return settings.JWT_ALGORITHM

    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        """Verify a password against its hash"""
        return self.pwd_context.verify(plain_password, hashed_password)

    def get_password_hash(self, password: str) -> str:
        """Hash a password"""
        return self.pwd_context.hash(password)

    def create_access_token(
        self,
        user: User,
        expires_delta: Optional[timedelta] = None
    ) -> str:
        """Create a signed, time-bound token encoding {id, username, email}"""
        now = datetime.now(timezone.utc)
        expire = now + (expires_delta or timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES))

        to_encode = {
            "id": user.id,
            "username": user.username,
            "email": user.email,
            "exp": expire,
            "iat": now,
            "type": "access",
        }
        return jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)

    def verify_token(self, token: str) -> Identity:
        """Verify and decode an access token into an Identity"""
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError as e:
            raise AuthenticationError(f"Invalid token: {str(e)}")

        if payload.get("type") != "access":
            raise AuthenticationError("Invalid token type")

        try:
            return Identity(
                id=int(payload["id"]),
                username=str(payload["username"]),
                email=str(payload["email"]),
            )
        except (KeyError, TypeError, ValueError):
            raise AuthenticationError("Token payload is incomplete")

    async def register_user(self, user_data: UserCreate, db: AsyncSession) -> Tuple[User, str]:
        """Register a new user and issue an access token"""
        username = (user_data.username or "").strip()
        email = (user_data.email or "").strip()
        if not username or not email or not user_data.password:
            raise ValidationError("Username, email, and password are required")

        existing = await db.execute(
            select(User.id).where(or_(User.username == username, User.email == email))
        )
        if existing.first() is not None:
            logger.info("Registration rejected", reason="user_exists", username=username)
            raise ValidationError("Username or email already exists")

        user = User(
            username=username,
            email=email,
            password_hash=self.get_password_hash(user_data.password),
            full_name=user_data.full_name or "",
        )
        db.add(user)
        try:
            await db.commit()
        except IntegrityError:
            # Lost a race against a concurrent registration
            await db.rollback()
            raise ValidationError("Username or email already exists")
        await db.refresh(user)

        logger.info("User registered", user_id=user.id, username=user.username)
        return user, self.create_access_token(user)

    async def authenticate_user(self, login_data: UserLogin, db: AsyncSession) -> Tuple[User, str]:
        """Authenticate by username or email and issue an access token"""
        ident = (login_data.username or "").strip()
        if not ident or not login_data.password:
            raise ValidationError("Username and password are required")

        result = await db.execute(
            select(User).where(or_(User.username == ident, User.email == ident)).limit(1)
        )
        user = result.scalar_one_or_none()

        if not user or not self.verify_password(login_data.password, user.password_hash):
            logger.warning("Login failed", reason="invalid_credentials", ident=ident)
            raise AuthError("Invalid credentials")

        return user, self.create_access_token(user)

    async def get_user(self, user_id: int, db: AsyncSession) -> User:
        user = await db.get(User, user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def update_profile(self, user_id: int, update: UserUpdate, db: AsyncSession) -> User:
        """Replace full name and bio; omitted fields are cleared"""
        user = await self.get_user(user_id, db)
        user.full_name = update.full_name or ""
        user.bio = update.bio or ""
        await db.commit()
        await db.refresh(user)
        return user


auth_service = AuthService()

