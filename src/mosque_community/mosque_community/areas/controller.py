from __future__ import annotations

from flask import Flask

from ..api.errors import ok
from ..api.guards import current_principal, make_guard
from ..api.schemas import AreaCreateIn, AreaUpdateIn, AssignFounderIn, parse_body
from ..auth.policy import Requirement
from ..container import Container


def register(app: Flask, container: Container) -> None:
    guard = make_guard(container.token_service)

    @app.route("/areas", methods=["GET"], endpoint="areas_list")
    @guard()
    def list_areas():
        return ok([a.to_dict() for a in container.area_service.list_areas(current_principal())])

    @app.route("/areas", methods=["POST"], endpoint="areas_create")
    @guard(Requirement.SUPER_ADMIN_ONLY)
    def create_area():
        body = parse_body(AreaCreateIn)
        area = container.area_service.create_area(
            current_principal(),
            area_name=body.area_name,
            mosque_name=body.mosque_name,
            address=body.address,
            prayer_times=body.prayer_times,
        )
        return ok(area.to_dict(), status=201)

    @app.route("/areas/<int:area_id>", methods=["PUT"], endpoint="areas_update")
    @guard(Requirement.FOUNDER_OR_ABOVE)
    def update_area(area_id: int):
        body = parse_body(AreaUpdateIn)
        area = container.area_service.update_area(
            current_principal(),
            area_id,
            area_name=body.area_name,
            mosque_name=body.mosque_name,
            address=body.address,
            prayer_times=body.prayer_times,
        )
        return ok(area.to_dict())

    @app.route("/areas/<int:area_id>/founder", methods=["PUT"], endpoint="areas_assign_founder")
    @guard(Requirement.SUPER_ADMIN_ONLY)
    def assign_founder(area_id: int):
        body = parse_body(AssignFounderIn)
        area = container.area_service.assign_founder(current_principal(), area_id, user_id=body.user_id)
        return ok(area.to_dict())

    @app.route("/areas/<int:area_id>/stats", methods=["GET"], endpoint="areas_stats")
    @guard(Requirement.FOUNDER_OR_ABOVE)
    def area_stats(area_id: int):
        return ok(container.area_service.area_stats(current_principal(), area_id))
