from typing import Dict, List, Optional, Sequence, Tuple

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.models.activity_log import ActivityLog
from helpdesk.models.comment import Comment
from helpdesk.models.enums import ACTIVE_STATUSES, Role
from helpdesk.models.report import Report
from helpdesk.models.user import User, normalize_email

STAFF_ROLES = (Role.TECHNICIAN, Role.ADMIN)


class UserRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, user_id: int) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.email == normalize_email(email)))
        return result.scalar_one_or_none()

    async def email_taken(self, email: str, exclude_id: Optional[int] = None) -> bool:
        query = select(User.id).where(User.email == normalize_email(email))
        if exclude_id is not None:
            query = query.where(User.id != exclude_id)
        result = await self.db.execute(query)
        return result.first() is not None

    async def find_many(
        self,
        search: Optional[str] = None,
        role: Optional[Role] = None,
        page: int = 1,
        limit: int = 10,
    ) -> Tuple[List[User], int]:
        where = []
        if search:
            pattern = f"%{search.lower()}%"
            where.append(or_(func.lower(User.name).like(pattern), func.lower(User.email).like(pattern)))
        if role is not None:
            where.append(User.role == role)

        result = await self.db.execute(
            select(User)
            .where(*where)
            .order_by(User.created_at.desc(), User.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        users = list(result.scalars().all())
        total = await self.db.execute(select(func.count(User.id)).where(*where))
        return users, total.scalar_one()

    async def staff(self) -> List[User]:
        result = await self.db.execute(
            select(User).where(User.role.in_(STAFF_ROLES)).order_by(User.name)
        )
        return list(result.scalars().all())

    async def active_report_counts(self, user_ids: Sequence[int], column: str) -> Dict[int, int]:
        """Open or in-progress reports per user, keyed on ``reported_by_id`` or ``assigned_to_id``."""
        if not user_ids:
            return {}
        col = getattr(Report, column)
        result = await self.db.execute(
            select(col, func.count(Report.id))
            .where(col.in_(user_ids), Report.status.in_(ACTIVE_STATUSES))
            .group_by(col)
        )
        return dict(result.all())

    async def has_history(self, user_id: int) -> bool:
        """True when the user filed reports, commented, or appears in an audit trail."""
        for query in (
            select(Report.id).where(Report.reported_by_id == user_id),
            select(Comment.id).where(Comment.author_id == user_id),
            select(ActivityLog.id).where(ActivityLog.user_id == user_id),
        ):
            result = await self.db.execute(query.limit(1))
            if result.first() is not None:
                return True
        return False

    async def create(self, **fields) -> User:
        if fields.get("email"):
            fields["email"] = normalize_email(fields["email"])
        user = User(**fields)
        self.db.add(user)
        await self.db.flush()
        return user

    async def release_assignments(self, user_id: int) -> None:
        await self.db.execute(
            update(Report).where(Report.assigned_to_id == user_id).values(assigned_to_id=None)
        )

    async def delete(self, user: User) -> None:
        await self.release_assignments(user.id)
        await self.db.execute(delete(User).where(User.id == user.id))
