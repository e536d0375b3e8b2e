import pytest

from league import create_app, db
from league.models import User
from league.services.ledger_service import ledger_service

PASSWORD = "Secret123"


@pytest.fixture
def app():
    app = create_app("testing")
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def ctx(app):
    with app.app_context():
        yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def users(app):
    """One login per participant used in tests, plus the administrator"""
    emails = {
        "vlado": "vlado@example.com",
        "fika": "Fika@example.com",
        "admin": app.config["LEAGUE_ADMIN_EMAIL"],
    }
    with app.app_context():
        for username, email in emails.items():
            user = User(username=username, email=email)
            user.set_password(PASSWORD)
            db.session.add(user)
        db.session.commit()
    return emails


@pytest.fixture
def login(client, users):
    def _login(who):
        response = client.post(
            "/auth/login", json={"email": users[who], "password": PASSWORD}
        )
        assert response.status_code == 200, response.get_json()
        return response

    return _login


@pytest.fixture
def service(ctx):
    return ledger_service
