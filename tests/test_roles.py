import uuid

import pytest
from sqlalchemy.exc import OperationalError

from coastwatch.models.enums import UserRole
from coastwatch.models.user_role import UserRoleGrant
from coastwatch.services import roles
from coastwatch.services.accounts import create_account
from coastwatch.services.roles import (
    role_satisfies, resolve_role, has_role, grant_role, highest_role,
)

ORDER = [UserRole.citizen, UserRole.authority, UserRole.admin]


@pytest.mark.parametrize("have", ORDER)
@pytest.mark.parametrize("need", ORDER)
def test_rank_comparison(have, need):
    assert role_satisfies(have, need) == (ORDER.index(have) >= ORDER.index(need))


def test_role_satisfies_accepts_strings_and_rejects_unknown():
    assert role_satisfies("admin", "citizen")
    assert not role_satisfies("citizen", "authority")
    assert not role_satisfies("", "citizen")
    assert not role_satisfies("superuser", "citizen")


def test_highest_role():
    assert highest_role([]) == UserRole.citizen
    assert highest_role([UserRole.citizen, UserRole.admin, UserRole.authority]) == UserRole.admin


def test_new_account_is_citizen(db):
    account = create_account(db, email="new@example.com", password="secret123")
    assert resolve_role(db, account.id) == UserRole.citizen
    rows = db.query(UserRoleGrant).filter(UserRoleGrant.user_id == account.id).all()
    assert [r.role for r in rows] == [UserRole.citizen]


def test_unknown_user_defaults_to_citizen(db):
    assert resolve_role(db, uuid.uuid4()) == UserRole.citizen
    assert resolve_role(db, None) == UserRole.citizen


def test_highest_granted_role_wins(db):
    account = create_account(db, email="boss@example.com", password="secret123")
    grant_role(db, account.id, UserRole.admin)
    assert resolve_role(db, account.id) == UserRole.admin
    assert has_role(db, account.id, UserRole.citizen)
    assert has_role(db, account.id, UserRole.authority)


def test_citizen_lacks_authority(db):
    account = create_account(db, email="c@example.com", password="secret123")
    assert not has_role(db, account.id, UserRole.authority)


def test_grant_role_is_idempotent(db):
    account = create_account(db, email="twice@example.com", password="secret123")
    first = grant_role(db, account.id, UserRole.authority)
    second = grant_role(db, account.id, UserRole.authority)
    assert first.id == second.id
    count = db.query(UserRoleGrant).filter(UserRoleGrant.user_id == account.id).count()
    assert count == 2  # citizen + authority


def test_lookup_failure_falls_back_to_citizen(db, monkeypatch):
    account = create_account(db, email="a@example.com", password="secret123")
    grant_role(db, account.id, UserRole.admin)

    def boom(*_a, **_kw):
        raise OperationalError("SELECT", {}, Exception("db down"))

    monkeypatch.setattr(roles, "list_roles", boom)
    assert resolve_role(db, account.id) == UserRole.citizen
    assert not has_role(db, account.id, UserRole.authority)
