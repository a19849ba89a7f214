from conftest import PASSWORD, auth

from helpdesk.models.enums import ReportStatus
from helpdesk.repositories import ReportRepository


async def test_register_creates_plain_user(client):
    response = await client.post(
        "/auth/register",
        json={"email": "carol@example.com", "name": "Carol", "password": "hunter22", "role": "ADMIN"},
    )
    assert response.status_code == 201
    user = response.json()
    assert user["role"] == "USER"
    assert user["email"] == "carol@example.com"
    assert "hashedPassword" not in user

    response = await client.post(
        "/auth/register",
        json={"email": "carol@example.com", "name": "Carol Again", "password": "hunter22"},
    )
    assert response.status_code == 400
    assert response.json()["error"] == "Email already registered"


async def test_register_validation(client):
    response = await client.post("/auth/register", json={"email": "not-an-email", "name": "C", "password": "123"})
    assert response.status_code == 400
    fields = {detail["field"] for detail in response.json()["details"]}
    assert fields == {"email", "name", "password"}


async def test_login_and_me(client, alice):
    response = await client.post("/auth/token", data={"username": alice.email, "password": PASSWORD})
    assert response.status_code == 200
    token = response.json()
    assert token["token_type"] == "bearer"

    response = await client.get("/auth/me", headers={"Authorization": f"Bearer {token['access_token']}"})
    assert response.status_code == 200
    assert response.json()["id"] == alice.id
    assert response.json()["role"] == "USER"


async def test_login_rejects_bad_password(client, alice):
    response = await client.post("/auth/token", data={"username": alice.email, "password": "wrong"})
    assert response.status_code == 401
    assert response.json() == {"error": "Incorrect email or password"}
    assert response.headers["www-authenticate"] == "Bearer"


async def test_garbage_token_is_rejected(client):
    response = await client.get("/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401
    assert response.json() == {"error": "Could not validate credentials"}


async def test_user_listing_permissions(client, admin, technician, alice):
    response = await client.get("/users", headers=auth(alice))
    assert response.status_code == 403

    for user in (admin, technician):
        response = await client.get("/users", headers=auth(user))
        assert response.status_code == 200
        assert response.json()["pagination"]["total"] == 3


async def test_user_listing_search_role_and_open_tickets(client, admin, alice, bob, create_report):
    await create_report(alice)
    closed = await create_report(alice)
    await client.put(f"/reports/{closed['id']}", json={"status": "CLOSED"}, headers=auth(admin))

    response = await client.get("/users", params={"role": "USER"}, headers=auth(admin))
    users = {user["email"]: user for user in response.json()["users"]}
    assert set(users) == {alice.email, bob.email}
    assert users[alice.email]["openTicketsCount"] == 1
    assert users[alice.email]["hasOpenTickets"] is True
    assert users[bob.email]["hasOpenTickets"] is False

    response = await client.get("/users", params={"search": "ALICE"}, headers=auth(admin))
    assert [user["id"] for user in response.json()["users"]] == [alice.id]


async def test_technicians_include_workload(client, admin, technician, alice, create_report):
    for _ in range(2):
        report = await create_report(alice)
        await client.put(f"/reports/{report['id']}/assign", json={"assignedToId": technician.id}, headers=auth(admin))

    response = await client.get("/users/technicians", headers=auth(technician))
    assert response.status_code == 200
    workload = {tech["name"]: tech["workload"] for tech in response.json()["technicians"]}
    assert workload == {"Ada Admin": 0, "Tom Tech": 2}

    response = await client.get("/users/technicians", headers=auth(alice))
    assert response.status_code == 403


async def test_admin_creates_and_updates_users(client, admin, technician):
    payload = {"email": "dan@example.com", "name": "Dan", "password": "secret99", "role": "TECHNICIAN"}
    response = await client.post("/users", json=payload, headers=auth(technician))
    assert response.status_code == 403

    response = await client.post("/users", json=payload, headers=auth(admin))
    assert response.status_code == 201
    dan = response.json()
    assert dan["role"] == "TECHNICIAN"

    response = await client.post("/users", json=payload, headers=auth(admin))
    assert response.status_code == 400
    assert response.json()["error"] == "A user with this email already exists"

    response = await client.put(f"/users/{dan['id']}", json={"name": "Daniel"}, headers=auth(admin))
    assert response.status_code == 200
    assert response.json()["name"] == "Daniel"

    response = await client.put(f"/users/{dan['id']}", json={"email": technician.email}, headers=auth(admin))
    assert response.status_code == 400
    assert response.json()["error"] == "Email already in use"

    response = await client.put(f"/users/{dan['id']}", json={"password": "brandnew1"}, headers=auth(admin))
    assert response.status_code == 200
    response = await client.post("/auth/token", data={"username": "dan@example.com", "password": "brandnew1"})
    assert response.status_code == 200

    response = await client.put("/users/9999", json={"name": "Nobody"}, headers=auth(admin))
    assert response.status_code == 404


async def test_demoting_technician_releases_assignments(client, admin, technician, alice, create_report, session_factory):
    report = await create_report(alice)
    await client.put(f"/reports/{report['id']}/assign", json={"assignedToId": technician.id}, headers=auth(admin))

    response = await client.put(f"/users/{technician.id}", json={"role": "USER"}, headers=auth(admin))
    assert response.status_code == 200
    assert response.json()["role"] == "USER"

    async with session_factory() as session:
        stored = await ReportRepository(session).get(report["id"])
    assert stored.assigned_to_id is None
    assert stored.status == ReportStatus.IN_PROGRESS


async def test_delete_user_rules(client, admin, alice, bob, create_report):
    await create_report(alice)

    response = await client.delete(f"/users/{bob.id}", headers=auth(alice))
    assert response.status_code == 403

    response = await client.delete(f"/users/{admin.id}", headers=auth(admin))
    assert response.status_code == 400

    response = await client.delete(f"/users/{alice.id}", headers=auth(admin))
    assert response.status_code == 400

    response = await client.delete(f"/users/{bob.id}", headers=auth(admin))
    assert response.status_code == 200
    assert response.json() == {"message": "User deleted"}

    response = await client.delete(f"/users/{bob.id}", headers=auth(admin))
    assert response.status_code == 404


async def test_deleted_user_token_stops_working(client, admin, bob):
    headers = auth(bob)
    await client.delete(f"/users/{bob.id}", headers=auth(admin))
    response = await client.get("/auth/me", headers=headers)
    assert response.status_code == 401


async def test_email_case_does_not_matter(client):
    response = await client.post(
        "/auth/register",
        json={"email": "Carol@Example.COM", "name": "Carol", "password": "hunter22"},
    )
    assert response.status_code == 201
    assert response.json()["email"] == "carol@example.com"

    for username in ("Carol@Example.COM", "carol@example.com"):
        response = await client.post("/auth/token", data={"username": username, "password": "hunter22"})
        assert response.status_code == 200

    response = await client.post(
        "/auth/register",
        json={"email": "CAROL@example.com", "name": "Carol Twin", "password": "hunter22"},
    )
    assert response.status_code == 400
    assert response.json()["error"] == "Email already registered"


async def test_admin_user_emails_are_normalized(client, admin, technician):
    payload = {"email": "Erin@Example.com", "name": "Erin", "password": "secret99", "role": "USER"}
    response = await client.post("/users", json=payload, headers=auth(admin))
    assert response.status_code == 201
    erin = response.json()
    assert erin["email"] == "erin@example.com"

    response = await client.post("/users", json={**payload, "email": "ERIN@example.com"}, headers=auth(admin))
    assert response.status_code == 400

    response = await client.put(f"/users/{erin['id']}", json={"email": technician.email.upper()}, headers=auth(admin))
    assert response.status_code == 400
    assert response.json()["error"] == "Email already in use"

    response = await client.put(f"/users/{erin['id']}", json={"email": "Erin.New@Example.com"}, headers=auth(admin))
    assert response.json()["email"] == "erin.new@example.com"


async def test_user_listing_role_all_and_invalid_role(client, admin, technician, alice):
    response = await client.get("/users", params={"role": "ALL"}, headers=auth(admin))
    assert response.status_code == 200
    assert response.json()["pagination"]["total"] == 3

    response = await client.get("/users", params={"role": "TECHNICIAN"}, headers=auth(admin))
    assert [user["id"] for user in response.json()["users"]] == [technician.id]

    response = await client.get("/users", params={"role": "MANAGER"}, headers=auth(admin))
    assert response.status_code == 400
    assert response.json()["error"] == "Invalid role"
