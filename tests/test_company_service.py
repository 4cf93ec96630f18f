"""
Tests for resolving wizard company names and interview meeting links.
"""

import pytest

from simplifyhr.services.company_service import find_or_create_company
from simplifyhr.services.meetings import MEETING_ID_LENGTH, generate_meeting_id, meeting_url


def test_existing_company_matched_case_insensitively(fake_db):
    db = fake_db()
    db.on("FROM companies WHERE LOWER(name)", [(3,)])

    assert find_or_create_company(db, "  acme corp ") == 3
    assert db.executed("FROM companies") == [{"name": "acme corp"}]
    assert db.executed("INSERT INTO companies") == []


def test_new_company_defaults_to_indonesia(fake_db):
    db = fake_db()
    db.on("INSERT INTO companies", [(9,)])

    assert find_or_create_company(db, "Nusantara Labs") == 9
    insert_sql = [sql for sql, _ in db.calls if "INSERT INTO companies" in sql][0]
    assert "'Indonesia'" in insert_sql


@pytest.mark.parametrize("name", ["", "   ", None])
def test_company_name_required(fake_db, name):
    db = fake_db()
    with pytest.raises(ValueError):
        find_or_create_company(db, name)
    assert db.calls == []


def test_meeting_id_is_lowercase_alphanumeric():
    meeting_id = generate_meeting_id()
    assert len(meeting_id) == MEETING_ID_LENGTH == 13
    assert meeting_id.isalnum() and meeting_id == meeting_id.lower()


def test_meeting_url_uses_configured_base_for_builtin_platform():
    url = meeting_url("simplifyhr", "https://meet.example.com/room/")
    assert url.startswith("https://meet.example.com/room/")
    assert len(url.rsplit("/", 1)[1]) == 13


def test_meeting_url_unknown_platform():
    with pytest.raises(ValueError, match="skype"):
        meeting_url("skype", "https://meet.example.com")
