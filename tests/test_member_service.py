from __future__ import annotations

import pytest
from werkzeug.security import check_password_hash

from src.mosque_community.mosque_community.common.pagination import PageRequest
from src.mosque_community.mosque_community.core.enums import MemberStatus, Role
from src.mosque_community.mosque_community.core.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from src.mosque_community.mosque_community.users.model import NewMember
from tests.conftest import DEFAULT_PASSWORD, NORTH, SOUTH


def test_founder_creates_member_with_defaults(container, repos, people):
    member = container.member_service.create_member(
        people.founder,
        NewMember(first_name="Ali", last_name="Khan", email="ali@x.com"),
    )

    assert member.username == "ali"
    assert member.status == MemberStatus.ACTIVE
    assert member.role == Role.MEMBER
    assert member.area_id == NORTH
    assert check_password_hash(repos.users.get_by_id(member.user_id).password_hash, DEFAULT_PASSWORD)


def test_founder_cannot_add_to_another_area(container, people):
    with pytest.raises(AuthorizationError):
        container.member_service.create_member(
            people.founder,
            NewMember(first_name="Ali", last_name="Khan", email="ali@x.com", area_id=SOUTH),
        )


def test_super_admin_can_place_member_in_any_area(container, people):
    member = container.member_service.create_member(
        people.admin,
        NewMember(first_name="Ali", last_name="Khan", email="ali@x.com", area_id=SOUTH),
    )
    assert member.area_id == SOUTH


def test_unknown_area_is_rejected(container, people):
    with pytest.raises(NotFoundError):
        container.member_service.create_member(
            people.admin,
            NewMember(first_name="Ali", last_name="Khan", email="ali@x.com", area_id=99),
        )


def test_members_cannot_create_members(container, people):
    with pytest.raises(AuthorizationError):
        container.member_service.create_member(
            people.member,
            NewMember(first_name="Ali", last_name="Khan", email="ali@x.com"),
        )


@pytest.mark.parametrize(
    "data",
    [
        NewMember(first_name=" ", last_name="Khan", email="ali@x.com"),
        NewMember(first_name="Ali", last_name="Khan", email="not-an-email"),
    ],
)
def test_invalid_member_data(container, people, data):
    with pytest.raises(ValidationError):
        container.member_service.create_member(people.admin, data)


def test_duplicate_username_or_email(container, people):
    with pytest.raises(ConflictError):
        container.member_service.create_member(
            people.admin, NewMember(first_name="Omar", last_name="Two", email="omar@elsewhere.org")
        )
    with pytest.raises(ConflictError):
        container.member_service.create_member(
            people.admin, NewMember(first_name="O", last_name="T", email="OMAR@mosque.org", username="omar2")
        )


def test_register_is_always_an_active_member(container):
    member = container.member_service.register(
        NewMember(
            first_name="Sara",
            last_name="Ahmed",
            email="sara@x.com",
            status=MemberStatus.INACTIVE,
            area_id=SOUTH,
        ),
        password="longenough",
    )
    assert member.role == Role.MEMBER
    assert member.status == MemberStatus.ACTIVE
    assert member.area_id == SOUTH


def test_register_requires_a_usable_password(container):
    with pytest.raises(ValidationError):
        container.member_service.register(
            NewMember(first_name="Sara", last_name="Ahmed", email="sara@x.com"), password="123"
        )


def test_member_list_is_scoped_by_role(container, people):
    svc = container.member_service

    mine = svc.list_members(people.member)
    assert [m.user_id for m in mine.items] == [people.member.user_id]

    north = svc.list_members(people.founder, area_id=SOUTH)
    assert {m.area_id for m in north.items} == {NORTH}
    assert north.total == 4

    everyone = svc.list_members(people.admin, page=PageRequest(page=2, limit=3))
    assert [m.user_id for m in everyone.items] == [4, 5, 6]
    assert everyone.total == 7
    assert everyone.total_pages == 3

    active = svc.list_members(people.admin, status=MemberStatus.INACTIVE)
    assert [m.username for m in active.items] == ["idle"]


def test_get_member_visibility(container, people):
    svc = container.member_service
    assert svc.get_member(people.member, people.member.user_id).username == "omar"
    assert svc.get_member(people.founder, people.member.user_id).username == "omar"
    with pytest.raises(AuthorizationError):
        svc.get_member(people.member, people.driver.user_id)
    with pytest.raises(AuthorizationError):
        svc.get_member(people.south_founder, people.member.user_id)
    with pytest.raises(NotFoundError):
        svc.get_member(people.admin, 404)


def test_founder_manages_only_own_area_members(container, repos, people):
    svc = container.member_service

    updated = svc.set_status(people.founder, people.member.user_id, MemberStatus.INACTIVE)
    assert updated.status == MemberStatus.INACTIVE
    assert repos.users.get_by_id(people.member.user_id).status == MemberStatus.INACTIVE

    with pytest.raises(AuthorizationError):
        svc.set_status(people.founder, people.south_member.user_id, MemberStatus.INACTIVE)
    with pytest.raises(AuthorizationError):
        svc.delete_member(people.founder, people.south_founder.user_id)
    with pytest.raises(ValidationError):
        svc.delete_member(people.founder, people.founder.user_id)


def test_super_admin_accounts_are_protected(container, people):
    with pytest.raises(AuthorizationError):
        container.member_service.delete_member(people.south_founder, people.admin.user_id)


def test_delete_member(container, repos, people):
    container.member_service.delete_member(people.admin, people.south_member.user_id)
    assert repos.users.get_by_id(people.south_member.user_id) is None
    with pytest.raises(NotFoundError):
        container.member_service.delete_member(people.admin, people.south_member.user_id)
