from __future__ import annotations

from flask import Flask

from ..api.errors import ok, ok_page
from ..api.guards import current_principal, make_guard
from ..api.schemas import (
    PickupActionIn,
    PickupCreateIn,
    parse_body,
    query_enum,
    query_flag,
    query_int,
    query_page,
)
from ..auth.policy import Requirement
from ..container import Container
from ..core.enums import PickupStatus
from . import state_machine
from .model import PickupRequest


def _request_json(req: PickupRequest) -> dict:
    data = req.to_dict()
    data["allowed_actions"] = [a.value for a in state_machine.allowed_actions(req.status)]
    return data


def register(app: Flask, container: Container) -> None:
    guard = make_guard(container.token_service)

    @app.route("/pickup-requests", methods=["GET"], endpoint="pickups_list")
    @guard()
    def list_requests():
        result = container.pickup_service.list_requests(
            current_principal(),
            status=query_enum("status", PickupStatus),
            area_id=query_int("area_id"),
            mine=query_flag("mine"),
            page=query_page(),
        )
        return ok_page(result, _request_json)

    @app.route("/pickup-requests", methods=["POST"], endpoint="pickups_create")
    @guard()
    def create_request():
        body = parse_body(PickupCreateIn)
        req = container.pickup_service.create_request(
            current_principal(),
            pickup_location=body.pickup_location,
            days=body.days,
            prayer_type=body.prayer_type,
            latitude=body.latitude,
            longitude=body.longitude,
            contact_number=body.contact_number,
            special_instructions=body.special_instructions,
            scheduled_time=body.scheduled_time,
        )
        return ok(_request_json(req), status=201)

    @app.route("/pickup-requests/available-drivers", methods=["GET"], endpoint="pickups_available_drivers")
    @guard(Requirement.FOUNDER_OR_ABOVE)
    def available_drivers():
        drivers = container.pickup_service.available_drivers(current_principal(), area_id=query_int("area_id"))
        return ok(
            [
                {"id": d.user_id, "full_name": d.full_name, "phone": d.phone, "mobility": d.mobility, "area_id": d.area_id}
                for d in drivers
            ]
        )

    @app.route("/pickup-requests/<int:request_id>", methods=["GET"], endpoint="pickups_get")
    @guard()
    def get_request(request_id: int):
        return ok(_request_json(container.pickup_service.get_request(current_principal(), request_id)))

    @app.route("/pickup-requests/<int:request_id>", methods=["PATCH"], endpoint="pickups_transition")
    @guard()
    def transition(request_id: int):
        body = parse_body(PickupActionIn)
        req = container.pickup_service.apply_action(
            current_principal(),
            request_id,
            body.action,
            **body.model_dump(exclude={"action"}),
        )
        return ok(_request_json(req))

    @app.route("/pickup-requests/<int:request_id>", methods=["DELETE"], endpoint="pickups_cancel")
    @guard()
    def cancel(request_id: int):
        req = container.pickup_service.cancel(current_principal(), request_id)
        return ok(_request_json(req))

    @app.route("/pickup-requests/<int:request_id>/history", methods=["GET"], endpoint="pickups_history")
    @guard()
    def history(request_id: int):
        entries = container.pickup_service.history(current_principal(), request_id)
        return ok([e.to_dict() for e in entries])
