"""Shared fixtures for the reconciliation test suite."""

from datetime import date

import pytest
from fastapi.testclient import TestClient

from app.config import ReconciliationSettings, get_settings
from app.database import close_database, get_session, open_database
from app.main import app
from app.models import Bank, Entity, PostingStatus
from app.stores import BankTransactionRecord, PostingRecord, memory_stores


@pytest.fixture
def stores():
    """Empty in-memory stores."""
    return memory_stores()


def _make_posting(**kwargs) -> PostingRecord:
    """Helper to create a PENDING posting with defaults."""
    defaults = {
        "id": "posting-1",
        "status": PostingStatus.PENDING,
        "occurrence_date": date(2026, 2, 10),
        "amount_cents": 15000,
        "entity_id": "entity-padaria",
        "entity_name": "PADARIA XYZ LTDA",
    }
    defaults.update(kwargs)
    return PostingRecord(**defaults)


def _make_bank_tx(**kwargs) -> BankTransactionRecord:
    """Helper to create a bank debit with defaults."""
    defaults = {
        "id": "tx-1",
        "bank_id": "bank-1",
        "posted_date": date(2026, 2, 10),
        "amount_cents": -15000,
        "description": "PADARIA XYZ",
        "fit_id": "202602100001",
        "ofx_file_hash": "hash-1",
    }
    defaults.update(kwargs)
    return BankTransactionRecord(**defaults)


@pytest.fixture
def db_session(tmp_path):
    """Session on a fresh SQLite ledger with one bank and one entity."""
    open_database(tmp_path / "ledger.db")
    session = get_session()
    session.add(Bank(id="bank-1", name="Caixa A"))
    session.add(Entity(id="entity-padaria", name="PADARIA XYZ LTDA"))
    session.commit()
    yield session
    session.close()
    close_database()


@pytest.fixture
def client(tmp_path):
    """TestClient bound to a fresh ledger database with default settings."""
    open_database(tmp_path / "api.db")
    session = get_session()
    session.add(Bank(id="bank-1", name="Caixa A"))
    session.add(Entity(id="entity-padaria", name="PADARIA XYZ LTDA"))
    session.commit()
    session.close()

    app.dependency_overrides[get_settings] = lambda: ReconciliationSettings()
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
    close_database()
