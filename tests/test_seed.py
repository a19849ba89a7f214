from helpdesk.models.enums import ReportStatus
from helpdesk.repositories import ReportFilters, ReportRepository, UserRepository
from helpdesk.seed import USERS, seed_database


async def test_seed_logs_match_report_history(engine, session_factory):
    await seed_database(bind=engine, session_factory=session_factory)

    async with session_factory() as session:
        repo = ReportRepository(session)
        reports, total = await repo.find_many(ReportFilters(), limit=10)
        assert total == 3

        history = {}
        for report in reports:
            history[report.title] = (report.status, [log.action for log in await repo.logs(report.id)])

    assert history == {
        "Accounting ERP is very slow": (ReportStatus.OPEN, ["created"]),
        "Computer does not power on": (ReportStatus.IN_PROGRESS, ["created", "assigned", "commented"]),
        "Intermittent internet in sales": (ReportStatus.RESOLVED, ["created", "assigned", "status_changed"]),
    }


async def test_seed_is_idempotent(engine, session_factory):
    await seed_database(bind=engine, session_factory=session_factory)
    await seed_database(bind=engine, session_factory=session_factory)

    async with session_factory() as session:
        _, total = await ReportRepository(session).find_many(ReportFilters())
        users, user_total = await UserRepository(session).find_many()
    assert total == 3
    assert user_total == len(USERS)
    assert {user.email for user in users} == {data["email"] for data in USERS}
