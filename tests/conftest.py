"""Shared fixtures."""

from uuid import uuid4

import pytest

from pocketbook.audit import AuditLogger
from pocketbook.config import BudgetSettings, ReportSettings, Settings
from pocketbook.services.storage import InMemoryAuditStorage, InMemoryBackend
from pocketbook.session import Session


@pytest.fixture
def backend():
    return InMemoryBackend()


@pytest.fixture
def audit_storage():
    return InMemoryAuditStorage()


@pytest.fixture
def audit_logger(audit_storage):
    return AuditLogger(storage=audit_storage)


@pytest.fixture
def guest():
    return Session.guest()


@pytest.fixture
def user():
    return Session(user_id=uuid4(), email="user@example.com")


@pytest.fixture
def budget_settings():
    return BudgetSettings()


@pytest.fixture
def report_settings():
    return ReportSettings(dpi=72)


@pytest.fixture
def settings(tmp_path, monkeypatch):
    """Settings whose data directory is a temporary folder."""
    monkeypatch.setenv("POCKETBOOK_STORAGE_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("POCKETBOOK_REPORT_DPI", "72")
    return Settings()
