from __future__ import annotations

from flask import Flask

from ..api.errors import ok
from ..api.guards import current_principal, make_guard
from ..api.schemas import ActivityIn, parse_body, query_date, query_enum, query_int
from ..container import Container
from ..core.constants import DEFAULT_ACTIVITY_STATS_DAYS
from ..core.enums import ActivityType


def register(app: Flask, container: Container) -> None:
    guard = make_guard(container.token_service)

    @app.route("/daily-activities", methods=["GET"], endpoint="activities_list")
    @guard()
    def list_activities():
        rows = container.activity_service.list_activities(
            current_principal(),
            on_date=query_date("date"),
            start_date=query_date("start_date"),
            end_date=query_date("end_date"),
            activity_type=query_enum("activity_type", ActivityType),
        )
        return ok([r.to_dict() for r in rows])

    @app.route("/daily-activities", methods=["POST"], endpoint="activities_record")
    @guard()
    def record_activity():
        body = parse_body(ActivityIn)
        row = container.activity_service.record(
            current_principal(),
            activity_date=body.activity_date,
            activity_type=body.activity_type,
            count_value=body.count_value,
            minutes_value=body.minutes_value,
        )
        return ok(row.to_dict(), status=201)

    @app.route("/daily-activities/stats", methods=["GET"], endpoint="activities_stats")
    @guard()
    def activity_stats():
        days = query_int("days") or DEFAULT_ACTIVITY_STATS_DAYS
        return ok(container.activity_service.stats(current_principal(), days=days))
