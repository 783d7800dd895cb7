from datetime import datetime, timedelta, timezone

import pytest

from core.storage import save_instance
from customauth import token_utils
from customauth.models import User
from tours.models import Tour

PASSWORD = "pass1234"


@pytest.fixture
def make_user(db):
    def _make_user(email="jonas@example.com", name="Jonas", role="user", password=PASSWORD, **extra):
        user = User(name=name, email=email, role=role, **extra)
        user.set_password(password, password)
        return save_instance(user)

    return _make_user


@pytest.fixture
def user(make_user):
    return make_user()


@pytest.fixture
def admin(make_user):
    return make_user(email="admin@example.com", name="Admin", role="admin")


@pytest.fixture
def auth_header():
    def _auth_header(user_or_token):
        token = user_or_token
        if isinstance(user_or_token, User):
            token = token_utils.create_access_token(user_or_token)
        return {"HTTP_AUTHORIZATION": f"Bearer {token}"}

    return _auth_header


@pytest.fixture
def token_issued_ago(monkeypatch):
    """
    Issue a token whose iat lies `seconds` in the past.
    """
    def _issue(user, seconds=60):
        with monkeypatch.context() as m:
            m.setattr(
                token_utils,
                "_now",
                lambda: datetime.now(timezone.utc) - timedelta(seconds=seconds),
            )
            return token_utils.create_access_token(user)

    return _issue


@pytest.fixture
def make_tour(db):
    counter = {"n": 0}

    def _make_tour(**overrides):
        counter["n"] += 1
        fields = {
            "name": f"The Test Tour number {counter['n']}",
            "duration": 5,
            "max_group_size": 10,
            "difficulty": "easy",
            "ratings_average": 4.5,
            "price": 500,
            "summary": "A tour used by the test suite",
            "image_cover": "tour-cover.jpg",
        }
        fields.update(overrides)
        return save_instance(Tour(**fields))

    return _make_tour


@pytest.fixture
def tour_payload():
    def _tour_payload(**overrides):
        payload = {
            "name": "The Forest Hiker",
            "duration": 5,
            "maxGroupSize": 25,
            "difficulty": "easy",
            "price": 397,
            "summary": "Breathtaking hike through the Canadian Banff National Park",
            "imageCover": "tour-1-cover.jpg",
            "startDates": ["2025-04-25T09:00:00+00:00"],
        }
        payload.update(overrides)
        return payload

    return _tour_payload
