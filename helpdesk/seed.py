"""
Seed data for local development
Creates an admin, a technician, a user and a few sample reports
"""
import asyncio

from sqlalchemy import select

from helpdesk import models  # noqa: F401
from helpdesk.core.database import AsyncSessionLocal, Base, engine
from helpdesk.core import policy
from helpdesk.core.policy import Identity
from helpdesk.core.security import get_password_hash
from helpdesk.models.enums import IncidentType, Priority, ReportStatus, Role
from helpdesk.models.user import User
from helpdesk.repositories import ReportRepository, UserRepository

DEMO_PASSWORD = "admin123"

USERS = [
    {"email": "admin@helpdesk.local", "name": "Administrator", "role": Role.ADMIN},
    {"email": "tech@helpdesk.local", "name": "Lead Technician", "role": Role.TECHNICIAN},
    {"email": "user@helpdesk.local", "name": "Demo User", "role": Role.USER},
]


async def get_or_create_user(users: UserRepository, email: str, name: str, role: Role) -> User:
    user = await users.get_by_email(email)
    if user:
        return user
    return await users.create(
        email=email,
        name=name,
        hashed_password=get_password_hash(DEMO_PASSWORD),
        role=role,
    )


async def seed_database(bind=engine, session_factory=AsyncSessionLocal):
    """Seed the database with demo data"""
    print("🌱 Starting database seeding...")

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    print("✅ Tables ready")

    async with session_factory() as session:
        users = UserRepository(session)
        admin, technician, user = [await get_or_create_user(users, **data) for data in USERS]

        existing = await session.execute(select(models.Report.id).limit(1))
        if existing.first() is not None:
            await session.commit()
            print("ℹ️  Reports already present, skipping sample reports")
            return

        reports = ReportRepository(session)
        reporter = Identity.from_user(user)
        erp = await reports.create(
            title="Accounting ERP is very slow",
            description="The ERP has been very slow since this morning and invoices cannot be processed.",
            type=IncidentType.COMPUTER_SLOW,
            priority=Priority.HIGH,
            status=ReportStatus.OPEN,
            location="Accounting office - 2nd floor",
            equipment="Workstation DELL-001",
            reported_by_id=user.id,
        )
        await reports.add_log(erp, user.id, policy.created_entry(reporter, erp))

        pc = await reports.create(
            title="Computer does not power on",
            description="Desk 15 computer beeps continuously when the power button is pressed.",
            type=IncidentType.HARDWARE_MALFUNCTION,
            priority=Priority.CRITICAL,
            status=ReportStatus.IN_PROGRESS,
            location="Open space - 1st floor",
            equipment="PC-WS-015",
            reported_by_id=user.id,
            assigned_to_id=technician.id,
        )
        await reports.add_log(pc, user.id, policy.created_entry(reporter, pc))
        await reports.add_log(
            pc, admin.id,
            policy.assigned_entry(Identity.from_user(admin), technician),
        )
        await reports.add_comment(pc, technician.id, "Faulty RAM module identified, replacing it.")
        tech = Identity.from_user(technician)
        await reports.add_log(pc, technician.id, policy.commented_entry(tech))

        wifi = await reports.create(
            title="Intermittent internet in sales",
            description="The connection drops every 10-15 minutes, mostly in the sales area.",
            type=IncidentType.INTERNET_CONNECTION,
            priority=Priority.MEDIUM,
            status=ReportStatus.RESOLVED,
            location="Sales area",
            reported_by_id=user.id,
            assigned_to_id=technician.id,
        )
        await reports.add_log(wifi, user.id, policy.created_entry(reporter, wifi))
        await reports.add_log(
            wifi, admin.id,
            policy.assigned_entry(Identity.from_user(admin), technician),
        )
        await reports.add_log(
            wifi, technician.id,
            policy.updated_entry(tech, ReportStatus.IN_PROGRESS, ReportStatus.RESOLVED),
        )

        await session.commit()

    print(f"✅ Seeded users (password '{DEMO_PASSWORD}'): " + ", ".join(data["email"] for data in USERS))
    print("✅ Seeded 3 sample reports")


if __name__ == "__main__":
    asyncio.run(seed_database())
