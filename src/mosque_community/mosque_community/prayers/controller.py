from __future__ import annotations

from flask import Flask

from ..api.errors import ok
from ..api.guards import current_principal, make_guard
from ..api.schemas import PrayerDayIn, PrayerIndividualIn, parse_body, query_date, query_int
from ..auth.policy import Requirement
from ..container import Container
from ..core.constants import DEFAULT_STATS_DAYS


def register(app: Flask, container: Container) -> None:
    guard = make_guard(container.token_service)

    @app.route("/prayers", methods=["GET"], endpoint="prayers_list")
    @guard()
    def list_prayers():
        on_date = query_date("date")
        start = on_date or query_date("start_date")
        end = on_date or query_date("end_date")
        records = container.prayer_service.list_records(current_principal(), start_date=start, end_date=end)
        return ok([r.to_dict() for r in records])

    @app.route("/prayers", methods=["POST"], endpoint="prayers_record_day")
    @guard()
    def record_day():
        body = parse_body(PrayerDayIn)
        records = container.prayer_service.record_day(
            current_principal(),
            prayer_date=body.prayer_date,
            statuses=body.prayers,
            location=body.location,
        )
        return ok([r.to_dict() for r in records], status=201)

    @app.route("/prayers/individual", methods=["PATCH"], endpoint="prayers_update_individual")
    @guard()
    def update_individual():
        body = parse_body(PrayerIndividualIn)
        record = container.prayer_service.update_individual(
            current_principal(),
            prayer_date=body.prayer_date,
            prayer_type=body.prayer_type,
            status=body.status,
            location=body.location,
        )
        return ok(record.to_dict())

    @app.route("/prayers/stats", methods=["GET"], endpoint="prayers_stats")
    @guard()
    def stats():
        days = query_int("days") or DEFAULT_STATS_DAYS
        return ok(container.prayer_service.member_stats(current_principal(), days=days))

    @app.route("/prayers/stats/global", methods=["GET"], endpoint="prayers_stats_global")
    @guard(Requirement.SUPER_ADMIN_ONLY)
    def global_stats():
        return ok(
            container.prayer_service.global_stats(
                current_principal(),
                start=query_date("start_date"),
                end=query_date("end_date"),
                area_id=query_int("area_id"),
            )
        )
