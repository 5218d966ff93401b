from __future__ import annotations

from flask import Flask

from ..api.errors import ok, ok_page
from ..api.guards import current_principal, make_guard
from ..api.schemas import (
    ChangePasswordIn,
    LoginIn,
    MemberCreateIn,
    MemberStatusIn,
    RegisterIn,
    parse_body,
    query_enum,
    query_int,
    query_page,
)
from ..auth.policy import Requirement
from ..container import Container
from ..core.enums import MemberStatus
from ..core.exceptions import NotFoundError
from .model import Member, NewMember


def _member_json(member: Member) -> dict:
    return member.to_public_dict()


def register(app: Flask, container: Container) -> None:
    guard = make_guard(container.token_service)

    # -------- Auth --------
    @app.route("/auth/login", methods=["POST"], endpoint="auth_login")
    def login():
        body = parse_body(LoginIn)
        principal, member = container.auth_service.authenticate(body.username, body.password)
        token = container.token_service.issue(principal)
        return ok(
            {
                "token": token,
                "token_type": "bearer",
                "role": principal.role.value,
                "user": _member_json(member),
            }
        )

    @app.route("/auth/register", methods=["POST"], endpoint="auth_register")
    def register_member():
        body = parse_body(RegisterIn)
        member = container.member_service.register(
            NewMember(
                first_name=body.first_name,
                last_name=body.last_name,
                email=str(body.email),
                username=body.username,
                phone=body.phone,
                address=body.address,
                mobility=body.mobility,
                area_id=body.area_id,
            ),
            password=body.password,
        )
        return ok(_member_json(member), status=201)

    @app.route("/auth/me", methods=["GET"], endpoint="auth_me")
    @guard()
    def me():
        principal = current_principal()
        member = container.users_repo.get_by_id(principal.user_id)
        if not member:
            raise NotFoundError("Member not found")
        return ok(_member_json(member))

    @app.route("/auth/change-password", methods=["POST"], endpoint="auth_change_password")
    @guard()
    def change_password():
        body = parse_body(ChangePasswordIn)
        container.auth_service.change_password(
            current_principal(),
            current_password=body.current_password,
            new_password=body.new_password,
        )
        return ok({"message": "Password changed"})

    @app.route("/auth/logout", methods=["POST"], endpoint="auth_logout")
    @guard()
    def logout():
        # Tokens are stateless; the client discards its copy.
        return ok({"message": "Logged out"})

    # -------- Members --------
    @app.route("/members", methods=["GET"], endpoint="members_list")
    @guard()
    def list_members():
        result = container.member_service.list_members(
            current_principal(),
            area_id=query_int("area_id"),
            status=query_enum("status", MemberStatus),
            page=query_page(),
        )
        return ok_page(result, _member_json)

    @app.route("/members", methods=["POST"], endpoint="members_create")
    @guard(Requirement.FOUNDER_OR_ABOVE)
    def create_member():
        body = parse_body(MemberCreateIn)
        member = container.member_service.create_member(
            current_principal(),
            NewMember(
                first_name=body.first_name,
                last_name=body.last_name,
                email=str(body.email),
                username=body.username,
                phone=body.phone,
                address=body.address,
                mobility=body.mobility,
                status=body.status,
                area_id=body.area_id,
            ),
        )
        return ok(_member_json(member), status=201)

    @app.route("/members/<int:user_id>", methods=["GET"], endpoint="members_get")
    @guard()
    def get_member(user_id: int):
        return ok(_member_json(container.member_service.get_member(current_principal(), user_id)))

    @app.route("/members/<int:user_id>", methods=["DELETE"], endpoint="members_delete")
    @guard(Requirement.FOUNDER_OR_ABOVE)
    def delete_member(user_id: int):
        container.member_service.delete_member(current_principal(), user_id)
        return ok({"id": user_id, "deleted": True})

    @app.route("/members/<int:user_id>/status", methods=["PATCH"], endpoint="members_status")
    @guard(Requirement.FOUNDER_OR_ABOVE)
    def set_member_status(user_id: int):
        body = parse_body(MemberStatusIn)
        member = container.member_service.set_status(current_principal(), user_id, body.status)
        return ok(_member_json(member))
