"""
Pytest markers and collection hooks for the hospital backend tests.

Imported by ``tests/conftest.py`` so the hooks are registered from the
test root.
"""

import pytest


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")
    config.addinivalue_line("markers", "services: mark test as service layer test")
    config.addinivalue_line("markers", "repositories: mark test as repository test")
    config.addinivalue_line("markers", "merge: mark test as patient-merge related")
    config.addinivalue_line("markers", "exams: mark test as exam catalogue related")
    config.addinivalue_line("markers", "menu: mark test as user/menu related")
    config.addinivalue_line("markers", "cli: mark test as management command test")
    config.addinivalue_line("markers", "database: mark test as database-related")


def pytest_collection_modifyitems(config, items):
    """Add markers based on test file location."""
    for item in items:
        path = str(item.fspath)
        if "unit" in path:
            item.add_marker(pytest.mark.unit)
        if "integration" in path:
            item.add_marker(pytest.mark.integration)
            item.add_marker(pytest.mark.database)
        if "merge" in path or "merge" in item.name:
            item.add_marker(pytest.mark.merge)
