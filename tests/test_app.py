from helpdesk.main import run


async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_run_serves_on_configured_port(monkeypatch):
    calls = []
    monkeypatch.setattr("helpdesk.main.uvicorn.run", lambda *args, **kwargs: calls.append((args, kwargs)))
    monkeypatch.setattr("helpdesk.main.settings.API_PORT", 8123)

    run()

    (args, kwargs), = calls
    assert args == ("helpdesk.main:app",)
    assert kwargs["port"] == 8123
