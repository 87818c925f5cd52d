"""
Shared fixtures: every test gets its own session directory, member database
and log directory under tmp_path
"""

import pytest
import yaml

from join_system.config import JoinConfig
from join_system.logger import JoinLogger
from join_system.member_db import MemberDatabase
from join_system.session import SessionManager


class FakeMembers:
    """Member store double that records every duplicate query"""

    def __init__(self, existing=(), error=None):
        self.existing = set(existing)
        self.error = error
        self.queries = []

    def email_exists(self, email):
        self.queries.append(email)
        if self.error is not None:
            raise self.error
        return email in self.existing


@pytest.fixture
def config(tmp_path):
    return JoinConfig({
        'session_dir': str(tmp_path / "sessions"),
        'cookie_secure': False,
        'database_path': str(tmp_path / "members.db"),
        'database_timeout': 1.0,
        'log_dir': str(tmp_path / "logs"),
    })


@pytest.fixture
def config_file(tmp_path, config):
    path = tmp_path / "join.yaml"
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(config.as_dict(), f)
    return path


@pytest.fixture
def members(config):
    db = MemberDatabase.from_config(config)
    db.initialize()
    return db


@pytest.fixture
def sessions(config):
    return SessionManager.from_config(config)


@pytest.fixture
def logger(config):
    return JoinLogger("test", config.log_dir)
