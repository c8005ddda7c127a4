import pytest

from merchstore import create_app
from merchstore.extensions import db
from merchstore.models import Size


@pytest.fixture
def app():
    app = create_app(
        {
            "TESTING": True,
            "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
            "LOG_TO_FILE": False,
        }
    )
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def test_unknown_route_returns_json(client):
    response = client.get("/api/does-not-exist")

    assert response.status_code == 404
    assert response.get_json() == {"error": "Route not found"}


def test_wrong_method_returns_json(client):
    response = client.patch("/api/sizes")

    assert response.status_code == 405
    assert "error" in response.get_json()


def test_non_json_body_is_rejected(client):
    response = client.post("/api/sizes", data="name=S", content_type="text/plain")

    assert response.status_code == 400
    body = response.get_json()
    assert body["error"] == "Validation failed"
    assert body["details"][0]["message"] == "Request body must be a JSON object"


def test_unhandled_error_rolls_back_session(client, app, monkeypatch):
    from merchstore.services import catalog

    def _explode(session):
        session.add(Size(name="half-written"))
        session.flush()
        raise RuntimeError("boom")

    monkeypatch.setattr(catalog, "list_sizes", _explode)

    response = client.get("/api/sizes")

    assert response.status_code == 500
    assert response.get_json() == {"error": "Something went wrong on the server"}
    assert Size.query.count() == 0


def test_request_id_is_echoed(client):
    response = client.get("/", headers={"X-Request-ID": "abc123"})

    assert response.get_json() == {"message": "API Running"}
    assert response.headers["X-Request-ID"] == "abc123"


def test_request_id_is_generated(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.get_json() == {"status": "OK", "database": "OK"}
    assert len(response.headers["X-Request-ID"]) == 32


def test_cors_headers(client, app):
    response = client.get("/api/sizes", headers={"Origin": "http://shop.local"})
    assert response.headers["Access-Control-Allow-Origin"] == "*"

    app.config["CORS_ALLOWED_ORIGINS"] = "http://admin.local"
    allowed = client.get("/api/sizes", headers={"Origin": "http://admin.local"})
    denied = client.get("/api/sizes", headers={"Origin": "http://shop.local"})

    assert allowed.headers["Access-Control-Allow-Origin"] == "http://admin.local"
    assert "Access-Control-Allow-Origin" not in denied.headers
