from __future__ import annotations

from types import SimpleNamespace

import pytest
from werkzeug.security import generate_password_hash

from src.mosque_community.mosque_community.areas.model import Area
from src.mosque_community.mosque_community.auth.principal import Principal
from src.mosque_community.mosque_community.auth.tokens import TokenSettings
from src.mosque_community.mosque_community.container import wire
from src.mosque_community.mosque_community.core.enums import MemberStatus, Role
from src.mosque_community.mosque_community.main import create_app
from src.mosque_community.mosque_community.users.model import Member
from tests.fakes import FIXED_NOW, FakeRepos

PASSWORD = "secret123"
DEFAULT_PASSWORD = "Welcome@123"
_PASSWORD_HASH = generate_password_hash(PASSWORD)

NORTH = 1
SOUTH = 2


def _member(user_id, username, role=Role.MEMBER, area_id=NORTH, **kw) -> Member:
    return Member(
        user_id=user_id,
        first_name=username.capitalize(),
        last_name="Test",
        username=username,
        email=f"{username}@mosque.org",
        password_hash=_PASSWORD_HASH,
        role=role,
        area_id=area_id,
        **kw,
    )


def _principal(member: Member) -> Principal:
    return Principal(user_id=member.user_id, role=member.role, area_id=member.area_id, username=member.username)


@pytest.fixture
def repos() -> FakeRepos:
    r = FakeRepos()
    r.areas.rows[NORTH] = Area(area_id=NORTH, area_name="North", mosque_name="Masjid An-Noor", founder_id=2)
    r.areas.rows[SOUTH] = Area(area_id=SOUTH, area_name="South", mosque_name="Masjid Al-Huda", founder_id=5)
    r.areas._next_id = 3

    r.users.add(_member(1, "admin", Role.SUPER_ADMIN, area_id=None))
    r.users.add(_member(2, "founder", Role.FOUNDER))
    r.users.add(_member(3, "omar", phone="0700000003"))
    r.users.add(_member(4, "yusuf", mobility="car", phone="0700000004"))
    r.users.add(_member(5, "hamza", Role.FOUNDER, area_id=SOUTH))
    r.users.add(_member(6, "bilal", area_id=SOUTH, mobility="motorbike"))
    r.users.add(_member(7, "idle", status=MemberStatus.INACTIVE))
    return r


@pytest.fixture
def people(repos: FakeRepos) -> SimpleNamespace:
    get = repos.users.get_by_id
    return SimpleNamespace(
        admin=_principal(get(1)),
        founder=_principal(get(2)),
        member=_principal(get(3)),
        driver=_principal(get(4)),
        south_founder=_principal(get(5)),
        south_member=_principal(get(6)),
        inactive=_principal(get(7)),
    )


@pytest.fixture
def container(repos: FakeRepos):
    return wire(
        conn=None,
        users_repo=repos.users,
        areas_repo=repos.areas,
        prayers_repo=repos.prayers,
        activities_repo=repos.activities,
        pickups_repo=repos.pickups,
        feeds_repo=repos.feeds,
        wakeups_repo=repos.wakeups,
        token_settings=TokenSettings(secret_key="test-jwt-secret", expire_minutes=60),
        default_password=DEFAULT_PASSWORD,
        clock=lambda: FIXED_NOW,
    )


@pytest.fixture
def app(container):
    return create_app(container, settings_module="config.testing")


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_headers(container):
    def _headers(principal: Principal) -> dict:
        return {"Authorization": f"Bearer {container.token_service.issue(principal)}"}

    return _headers
