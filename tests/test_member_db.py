import sqlite3

import pytest

from join_system.logger import StoreUnavailable
from join_system.member_db import MemberDatabase


def test_empty_database_has_no_duplicates(members):
    assert members.count_by_email("dup@example.com") == 0
    assert not members.email_exists("dup@example.com")


def test_existing_email_is_counted(members):
    members.add_member("dup@example.com", name="Dup")

    assert members.count_by_email("dup@example.com") == 1
    assert members.email_exists("dup@example.com")


def test_match_is_exact(members):
    members.add_member("dup@example.com")

    assert not members.email_exists("DUP@example.com")
    assert not members.email_exists("dup@example.com ")
    assert not members.email_exists("%@example.com")


def test_email_is_bound_not_concatenated(members):
    members.add_member("dup@example.com")

    assert members.count_by_email("' OR '1'='1") == 0
    assert members.count_by_email("x'; DROP TABLE members; --") == 0
    assert members.email_exists("dup@example.com")


def test_missing_database_is_unavailable(tmp_path):
    members = MemberDatabase(tmp_path / "missing.db", timeout=0.5)

    with pytest.raises(StoreUnavailable):
        members.email_exists("dup@example.com")
    assert not (tmp_path / "missing.db").exists()


def test_database_without_table_is_unavailable(tmp_path):
    path = tmp_path / "empty.db"
    path.write_bytes(b"")
    members = MemberDatabase(path)

    with pytest.raises(StoreUnavailable):
        members.count_by_email("dup@example.com")


def test_list_members(members):
    members.add_member("a@example.com", name="A")
    members.add_member("b@example.com")

    listed = members.list_members()

    assert [m['email'] for m in listed] == ["a@example.com", "b@example.com"]
    assert listed[0]['name'] == "A"
    assert listed[1]['name'] is None
    assert 'password' not in listed[0]


def test_lock_timeout_is_unavailable(members):
    locker = sqlite3.connect(members.path, isolation_level=None)
    locker.execute("BEGIN EXCLUSIVE")
    try:
        with pytest.raises(StoreUnavailable):
            MemberDatabase(members.path, timeout=0.3).email_exists("dup@example.com")
    finally:
        locker.execute("ROLLBACK")
        locker.close()

    assert not members.email_exists("dup@example.com")
