"""
Owner directory - maps an external identity to the internal owner profile.

Owners are created lazily the first time an identity shows up. Creation runs in
a SAVEPOINT so a duplicate-key race with a concurrent request only rolls back
this insert, after which the winner's row is used.
"""

import logging
import uuid
from dataclasses import dataclass
from typing import ClassVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from marketplace.core.errors import ValidationError
from marketplace.core.security import IdentityContext
from marketplace.db.models.user import User
from marketplace.db.repositories.user_repository import UserRepository
from marketplace.schemas.user import RegisterRequest

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OwnerById:
    owner_id: uuid.UUID


@dataclass(frozen=True)
class OwnerByExternalIdentity:
    identity_id: str


OwnerRef = OwnerById | OwnerByExternalIdentity


def parse_owner_ref(raw: str) -> OwnerRef:
    """Internal ids are UUIDs; anything else is an identity-provider subject."""
    try:
        return OwnerById(uuid.UUID(raw))
    except ValueError:
        return OwnerByExternalIdentity(raw)


@dataclass(frozen=True)
class Persisted:
    owner: User
    persisted: ClassVar[bool] = True


@dataclass(frozen=True)
class Ephemeral:
    """Owner that exists only for this request; writes referencing it are not durable."""

    owner: User
    persisted: ClassVar[bool] = False


OwnerResolution = Persisted | Ephemeral


def _owner_from_identity(identity: IdentityContext) -> User:
    if identity.email:
        email = identity.email
        name = identity.email.split("@")[0] or "User"
    else:
        email = f"{identity.uid}@users.invalid"
        name = "User"
    return User(
        id=uuid.uuid4(),
        external_identity_id=identity.uid,
        email=email,
        name=name,
        role="buyer",
        addresses=[],
    )


class OwnerDirectory:
    def __init__(self, users: UserRepository):
        self.users = users

    async def resolve(self, identity: IdentityContext) -> OwnerResolution:
        """Find the owner for an identity, creating a minimal profile if absent."""
        owner = await self.users.get_by_external_identity(identity.uid)
        if owner is not None:
            return Persisted(owner)

        owner = _owner_from_identity(identity)
        session = self.users.session
        try:
            async with session.begin_nested():
                session.add(owner)
                await session.flush()
        except IntegrityError:
            winner = await self.users.get_by_external_identity(identity.uid)
            if winner is not None:
                return Persisted(winner)
            logger.warning("Could not create owner for identity %s: email %s already taken", identity.uid, owner.email)
            return Ephemeral(owner)
        except SQLAlchemyError:
            logger.warning("Could not create owner for identity %s", identity.uid, exc_info=True)
            return Ephemeral(owner)

        logger.info("Auto-created owner %s for identity %s", owner.id, identity.uid)
        return Persisted(owner)

    async def find(self, ref: OwnerRef) -> User | None:
        if isinstance(ref, OwnerById):
            return await self.users.get_by_id(ref.owner_id)
        return await self.users.get_by_external_identity(ref.identity_id)

    async def register(self, identity: IdentityContext, data: RegisterRequest) -> tuple[User, str]:
        """
        Create or refresh the caller's profile.

        Returns the owner and one of "created", "rebound" (an existing profile
        with the same email now points at this identity) or "existing".
        """
        email = data.email or identity.email
        if not email:
            raise ValidationError.single("email", "Email is required")

        owner = await self.users.get_by_identity_or_email(identity.uid, email)
        if owner is None:
            owner = User(
                external_identity_id=identity.uid,
                email=email,
                name=data.name or email.split("@")[0],
                phone=data.phone,
                role="buyer",
                addresses=[],
            )
            owner = await self.users.add(owner)
            logger.info("Registered owner %s for identity %s", owner.id, identity.uid)
            return owner, "created"

        outcome = "existing"
        if owner.external_identity_id != identity.uid:
            logger.info("Rebinding owner %s to identity %s", owner.id, identity.uid)
            owner.external_identity_id = identity.uid
            outcome = "rebound"
        if data.name:
            owner.name = data.name
        if data.phone:
            owner.phone = data.phone
        owner = await self.users.save(owner)
        return owner, outcome
