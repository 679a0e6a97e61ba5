"""
Root pytest configuration for the Django project.

pytest-django loads config.settings (see pyproject.toml). App-specific
fixtures are defined in each app's conftest.py.
"""

import pytest


def pytest_configure():
    """Adjust settings for the test run."""
    from django.conf import settings

    # Test client requests are plain http
    settings.SECURE_SSL_REDIRECT = False

    # Use fast password hasher for tests
    settings.PASSWORD_HASHERS = [
        "django.contrib.auth.hashers.MD5PasswordHasher",
    ]


def pytest_collection_modifyitems(items):
    """
    Auto-mark tests based on filename patterns.

    Mapping:
    - test_views.py, test_tasks.py, test_admin.py, service tests → integration
    - test_models.py, test_locks.py, adapter/client/strategy tests → unit
    - Unmatched files → integration (safe default for Django)

    Explicit markers on test functions/classes take precedence.
    """
    integration_patterns = [
        "test_views.py",
        "test_tasks.py",
        "test_admin.py",
        "test_transfer_processor.py",
        "test_seller_onboarding.py",
    ]

    unit_patterns = [
        "test_models.py",
        "test_locks.py",
        "test_stripe_adapter.py",
        "test_strategies.py",
        "test_client.py",
        "test_types.py",
    ]

    for item in items:
        existing_markers = {m.name for m in item.iter_markers()}
        if existing_markers & {"unit", "integration"}:
            continue

        filename = item.path.name

        if filename in integration_patterns:
            item.add_marker(pytest.mark.integration)
        elif filename in unit_patterns:
            item.add_marker(pytest.mark.unit)
        else:
            item.add_marker(pytest.mark.integration)
