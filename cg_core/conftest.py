# cg_core/conftest.py
import itertools

import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from cg_core.iam.models import Role, UserProfile

_usernames = itertools.count(1)


@pytest.fixture
def make_user(db):
    """
    Factory for users with a given role.
    The post_save signal creates the profile (VIEWER); the role is set afterwards.
    """
    User = get_user_model()

    def _make(role=Role.VIEWER, *, username=None, **extra):
        user = User.objects.create_user(
            username=username or f"user{next(_usernames)}",
            password="testpass",
            **extra,
        )
        UserProfile.objects.filter(user=user).update(role=role)
        return user

    return _make


@pytest.fixture
def ccro(make_user):
    return make_user(Role.CCRO_TEAM, username="ccro")


@pytest.fixture
def ceo(make_user):
    return make_user(Role.CEO, username="ceo")


@pytest.fixture
def owner(make_user):
    return make_user(Role.OWNER, username="owner")


@pytest.fixture
def viewer(make_user):
    return make_user(Role.VIEWER, username="viewer")


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def client_for():
    """
    client_for(user) -> APIClient authenticated as user.
    """

    def _client(user):
        c = APIClient()
        c.force_authenticate(user=user)
        return c

    return _client
