from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Optional

from .activities.mysql_activity_repository import MySQLActivityRepository
from .activities.repository import ActivityRepository
from .activities.service import ActivityService
from .areas.mysql_area_repository import MySQLAreaRepository
from .areas.repository import AreaRepository
from .areas.service import AreaService
from .auth.tokens import TokenService, TokenSettings
from .core.constants import DEFAULT_TOKEN_MINUTES
from .database.connection import DBConfig, DatabaseConnection
from .feeds.mysql_feed_repository import MySQLFeedRepository
from .feeds.repository import FeedRepository
from .feeds.service import FeedService
from .pickups.mysql_pickup_repository import MySQLPickupRequestRepository
from .pickups.repository import PickupRequestRepository
from .pickups.service import PickupService
from .prayers.mysql_prayer_repository import MySQLPrayerRepository
from .prayers.repository import PrayerRepository
from .prayers.service import PrayerService
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService, MemberService
from .wakeups.mysql_wakeup_repository import MySQLWakeUpCallRepository
from .wakeups.repository import WakeUpCallRepository
from .wakeups.service import WakeUpCallService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    users_repo: UserRepository
    areas_repo: AreaRepository
    prayers_repo: PrayerRepository
    activities_repo: ActivityRepository
    pickups_repo: PickupRequestRepository
    feeds_repo: FeedRepository
    wakeups_repo: WakeUpCallRepository

    token_service: TokenService
    auth_service: AuthService
    member_service: MemberService
    prayer_service: PrayerService
    activity_service: ActivityService
    pickup_service: PickupService
    feed_service: FeedService
    area_service: AreaService
    wakeup_service: WakeUpCallService


def wire(
    *,
    conn: Optional[DatabaseConnection],
    users_repo: UserRepository,
    areas_repo: AreaRepository,
    prayers_repo: PrayerRepository,
    activities_repo: ActivityRepository,
    pickups_repo: PickupRequestRepository,
    feeds_repo: FeedRepository,
    wakeups_repo: WakeUpCallRepository,
    token_settings: TokenSettings,
    default_password: str,
    clock: Optional[Callable[[], datetime]] = None,
) -> Container:
    """Assemble services on top of any set of repositories.

    ``clock`` is shared by the services that stamp times (pickups, feeds, wake-up calls).
    """

    clock_kw = {"clock": clock} if clock is not None else {}

    return Container(
        conn=conn,
        users_repo=users_repo,
        areas_repo=areas_repo,
        prayers_repo=prayers_repo,
        activities_repo=activities_repo,
        pickups_repo=pickups_repo,
        feeds_repo=feeds_repo,
        wakeups_repo=wakeups_repo,
        token_service=TokenService(token_settings),
        auth_service=AuthService(users_repo),
        member_service=MemberService(users_repo, areas_repo, default_password=default_password),
        prayer_service=PrayerService(prayers_repo),
        activity_service=ActivityService(activities_repo),
        pickup_service=PickupService(pickups_repo, users_repo, **clock_kw),
        feed_service=FeedService(feeds_repo, areas_repo, **clock_kw),
        area_service=AreaService(areas_repo, users_repo, prayers_repo, pickups_repo),
        wakeup_service=WakeUpCallService(wakeups_repo, users_repo, **clock_kw),
    )


def build_container(*, db_config: dict, settings: Any) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    token_settings = TokenSettings(
        secret_key=str(getattr(settings, "JWT_SECRET_KEY", None) or getattr(settings, "SECRET_KEY")),
        algorithm=str(getattr(settings, "JWT_ALGORITHM", "HS256")),
        expire_minutes=int(getattr(settings, "JWT_EXPIRE_MINUTES", DEFAULT_TOKEN_MINUTES)),
    )

    return wire(
        conn=conn,
        users_repo=MySQLUserRepository(conn),
        areas_repo=MySQLAreaRepository(conn),
        prayers_repo=MySQLPrayerRepository(conn),
        activities_repo=MySQLActivityRepository(conn),
        pickups_repo=MySQLPickupRequestRepository(conn),
        feeds_repo=MySQLFeedRepository(conn),
        wakeups_repo=MySQLWakeUpCallRepository(conn),
        token_settings=token_settings,
        default_password=str(getattr(settings, "DEFAULT_MEMBER_PASSWORD")),
    )
