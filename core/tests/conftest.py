"""
Pytest configuration and fixtures for RoutineOS tests.
"""
import pytest
from django.contrib.auth import get_user_model
from django.core.cache import cache
from rest_framework.test import APIClient


@pytest.fixture(autouse=True)
def clear_cache():
    """Rate limits and flag overrides live in the cache; start each test clean."""
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def api_client():
    """Returns an API client instance."""
    return APIClient()


@pytest.fixture
def user(db):
    """Creates and returns a test user."""
    return get_user_model().objects.create_user(
        username='testuser',
        email='test@example.com',
        password='testpass123'
    )


@pytest.fixture
def other_user(db):
    """Creates and returns another test user for access control tests."""
    return get_user_model().objects.create_user(
        username='otheruser',
        email='other@example.com',
        password='otherpass123'
    )


@pytest.fixture
def authenticated_client(api_client, user):
    """Returns a session-authenticated API client."""
    api_client.force_login(user)
    return api_client


@pytest.fixture
def habit(user):
    from core.tests.factories import HabitFactory
    return HabitFactory.create(user, name='Meditate')
