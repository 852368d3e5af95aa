"""
Shared pytest fixtures for the Aegis test suite.

PBKDF2 runs at 100k iterations in production; the autouse fixture below
lowers it so account and key-derivation tests stay fast. Every database
lives under pytest's tmp_path.
"""

import os

import pytest

from aegis_vault import crypto
from aegis_vault.credentials import CredentialService
from aegis_vault.database import Database
from aegis_vault.users import UserService


@pytest.fixture(autouse=True)
def _fast_kdf(monkeypatch):
    monkeypatch.setattr(crypto, "PBKDF2_ITERATIONS", 1000)


@pytest.fixture
def master_db(tmp_path):
    db = Database(str(tmp_path / "aegis.db"))
    db.initialize_master_database()
    yield db
    db.close()


@pytest.fixture
def vault_db(tmp_path):
    db = Database(str(tmp_path / "alice01.db"))
    db.initialize_vault_database()
    yield db
    db.close()


@pytest.fixture
def key():
    return os.urandom(crypto.KEY_SIZE)


@pytest.fixture
def users(master_db):
    return UserService(master_db)


@pytest.fixture
def credentials(vault_db):
    return CredentialService(vault_db)


class ScriptedPrompt:
    """Stand-in for prompt_toolkit.prompt that replays canned answers."""

    def __init__(self, answers):
        self.answers = list(answers)
        self.messages = []

    def __call__(self, message="", **kwargs):
        self.messages.append((message, kwargs))
        if not self.answers:
            raise AssertionError(f"Unexpected prompt: {message!r}")
        return self.answers.pop(0)


@pytest.fixture
def scripted_prompt(monkeypatch):
    """Install a ScriptedPrompt into the aegis CLI module."""
    import aegis

    def install(*answers):
        fake = ScriptedPrompt(answers)
        monkeypatch.setattr(aegis, "prompt", fake)
        return fake

    monkeypatch.setattr(aegis.ui, "wait_for_key", lambda *a, **k: None)
    monkeypatch.setattr(aegis.time, "sleep", lambda s: None)
    return install
