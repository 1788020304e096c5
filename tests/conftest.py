"""Shared fixtures for docsift tests."""

import pytest


@pytest.fixture
def people():
    """Sample documents used across the matching tests."""
    return [
        {"name": "Alice", "age": 30, "city": "NYC", "tags": ["admin", "user"]},
        {"name": "Bob", "age": 25, "city": "SF", "tags": ["user"]},
        {"name": "Charlie", "age": 35, "city": "NYC", "tags": ["admin", "moderator"]},
        {"name": "Diana", "age": 28, "city": "LA", "tags": ["user", "moderator"]},
    ]


@pytest.fixture
def nested_users():
    """Documents with nested profiles."""
    return [
        {"user": {"name": "Alice", "profile": {"age": 30, "city": "NYC"}}},
        {"user": {"name": "Bob", "profile": {"age": 25, "city": "SF"}}},
        {"user": {"name": "Charlie", "profile": {"age": 35}}},
    ]
