from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.config import Settings
from app.core.security import create_access_token, hash_password, verify_password
from app.models.account import Membership, Organization, User
from app.models.dashboard import Dashboard
from app.schemas.account import LoginRequest, RegisterRequest
import structlog

logger = structlog.get_logger()


class EmailAlreadyRegistered(Exception):
    pass


class InvalidCredentials(Exception):
    pass


class AccountService:
    """Registration, login and profile lookups"""

    def __init__(self, db: AsyncSession, settings: Settings):
        self.db = db
        self.settings = settings

    async def register(self, data: RegisterRequest) -> tuple[User, str]:
        """
        Create organization, user, owner membership and a default dashboard
        in one transaction

        Returns:
            the new user and a bearer token for it
        """
        existing = await self.db.execute(select(User.id).where(User.email == data.email))
        if existing.scalar_one_or_none() is not None:
            raise EmailAlreadyRegistered(data.email)

        organization = Organization(name=data.company or f"{data.name}'s Organization")
        user = User(
            email=data.email,
            name=data.name,
            password_hash=hash_password(data.password, self.settings.bcrypt_rounds),
            company=data.company,
            role="admin"
        )

        try:
            self.db.add_all([organization, user])
            # Ids are needed for the rows that reference them
            await self.db.flush()
            self.db.add_all([
                Membership(user_id=user.id, org_id=organization.id, role="owner"),
                Dashboard(
                    org_id=organization.id,
                    name="My First Dashboard",
                    description="Get started by adding widgets to track your KPIs",
                    created_by=user.id
                ),
            ])
            await self.db.commit()
        except IntegrityError:
            # Lost a race with a concurrent registration for the same email
            await self.db.rollback()
            raise EmailAlreadyRegistered(data.email)
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("account_registration_rolled_back", email=data.email, error=str(e))
            raise

        logger.info("account_registered", user_id=user.id, org_id=organization.id)

        token = create_access_token(self.settings, user.id, user.email, organization.id)
        return user, token

    async def login(self, data: LoginRequest) -> tuple[User, str]:
        result = await self.db.execute(select(User).where(User.email == data.email))
        user = result.scalar_one_or_none()

        if user is None or not verify_password(data.password, user.password_hash):
            raise InvalidCredentials()

        membership = await self.db.execute(
            select(Membership.org_id).where(Membership.user_id == user.id)
        )
        org_id = membership.scalars().first()

        logger.info("user_logged_in", user_id=user.id, org_id=org_id)

        token = create_access_token(self.settings, user.id, user.email, org_id)
        return user, token

    async def get_profile(self, user_id: str) -> dict[str, Any] | None:
        user = await self.db.get(User, user_id)
        if user is None:
            return None

        result = await self.db.execute(
            select(Organization.id, Organization.name, Organization.plan, Membership.role.label("member_role"))
            .join(Membership, Membership.org_id == Organization.id)
            .where(Membership.user_id == user_id)
        )
        organization = result.first()

        return {
            "user": user,
            "organization": dict(organization._mapping) if organization else None
        }
