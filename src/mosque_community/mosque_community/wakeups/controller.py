from __future__ import annotations

from flask import Flask

from ..api.errors import ok, ok_page
from ..api.guards import current_principal, make_guard
from ..api.schemas import WakeUpCallIn, parse_body, query_date, query_enum, query_int, query_page
from ..auth.policy import Requirement
from ..container import Container
from ..core.enums import WakeUpResponse
from .model import WakeUpCall


def _call_json(call: WakeUpCall) -> dict:
    return call.to_dict()


def register(app: Flask, container: Container) -> None:
    guard = make_guard(container.token_service)

    @app.route("/wake-up-calls", methods=["POST"], endpoint="wakeups_record")
    @guard()
    def record_call():
        body = parse_body(WakeUpCallIn)
        call = container.wakeup_service.record(current_principal(), **body.model_dump())
        return ok(_call_json(call), status=201)

    @app.route("/wake-up-calls", methods=["GET"], endpoint="wakeups_list")
    @guard(Requirement.FOUNDER_OR_ABOVE)
    def list_calls():
        result = container.wakeup_service.list_calls(
            current_principal(),
            call_date=query_date("date"),
            call_response=query_enum("status", WakeUpResponse),
            area_id=query_int("area_id"),
            page=query_page(),
        )
        return ok_page(result, _call_json)

    @app.route("/wake-up-calls/stats", methods=["GET"], endpoint="wakeups_stats")
    @guard(Requirement.FOUNDER_OR_ABOVE)
    def call_stats():
        return ok(
            container.wakeup_service.stats(
                current_principal(),
                start_date=query_date("date_from"),
                end_date=query_date("date_to"),
                area_id=query_int("area_id"),
            )
        )
