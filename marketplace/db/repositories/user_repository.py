"""
User repository - owner lookups by internal id and external identity, or by email when rebinding.
"""

from sqlalchemy import or_, select

from marketplace.db.models.user import User
from marketplace.db.repositories.base_repository import BaseRepository


class UserRepository(BaseRepository[User]):
    """User-specific queries. Extends base CRUD with identity lookups."""

    def __init__(self, session):
        super().__init__(session, User)

    async def get_by_external_identity(self, identity_id: str) -> User | None:
        result = await self.session.execute(select(User).where(User.external_identity_id == identity_id))
        return result.scalar_one_or_none()

    async def get_by_identity_or_email(self, identity_id: str, email: str | None) -> User | None:
        """Prefer the identity match; fall back to an email match."""
        clauses = [User.external_identity_id == identity_id]
        if email:
            clauses.append(User.email == email)
        result = await self.session.execute(select(User).where(or_(*clauses)))
        users = list(result.scalars().all())
        for user in users:
            if user.external_identity_id == identity_id:
                return user
        return users[0] if users else None
