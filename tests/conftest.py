import pytest
from django.contrib.auth import get_user_model
from django.test import Client


@pytest.fixture
def make_user(db):
    User = get_user_model()

    def make(username, **extra):
        extra.setdefault('email', f"{username}@example.com")
        return User.objects.create_user(username=username, password="pass12345!", **extra)
    return make


@pytest.fixture
def alice(make_user):
    return make_user("alice")


@pytest.fixture
def bob(make_user):
    return make_user("bob")


@pytest.fixture
def carol(make_user):
    return make_user("carol")


@pytest.fixture
def client_for():
    def make(user):
        client = Client()
        client.force_login(user)
        return client
    return make
