from __future__ import annotations

from flask import Flask

from ..api.errors import ok, ok_page
from ..api.guards import current_principal, make_guard
from ..api.schemas import FeedIn, FeedUpdateIn, parse_body, query_int, query_page
from ..auth.policy import Requirement
from ..container import Container
from .model import Feed


def _feed_json(feed: Feed) -> dict:
    return feed.to_dict()


def register(app: Flask, container: Container) -> None:
    guard = make_guard(container.token_service)

    @app.route("/feeds", methods=["GET"], endpoint="feeds_list")
    @guard()
    def list_feeds():
        result = container.feed_service.list_feeds(current_principal(), area_id=query_int("area_id"), page=query_page())
        return ok_page(result, _feed_json)

    @app.route("/feeds", methods=["POST"], endpoint="feeds_create")
    @guard(Requirement.FOUNDER_OR_ABOVE)
    def create_feed():
        body = parse_body(FeedIn)
        feed = container.feed_service.create_feed(current_principal(), **body.model_dump())
        return ok(_feed_json(feed), status=201)

    @app.route("/feeds/<int:feed_id>", methods=["GET"], endpoint="feeds_get")
    @guard()
    def get_feed(feed_id: int):
        return ok(_feed_json(container.feed_service.get_feed(current_principal(), feed_id)))

    @app.route("/feeds/<int:feed_id>", methods=["PUT"], endpoint="feeds_update")
    @guard(Requirement.FOUNDER_OR_ABOVE)
    def update_feed(feed_id: int):
        body = parse_body(FeedUpdateIn)
        feed = container.feed_service.update_feed(current_principal(), feed_id, **body.model_dump(exclude_unset=True))
        return ok(_feed_json(feed))

    @app.route("/feeds/<int:feed_id>", methods=["DELETE"], endpoint="feeds_delete")
    @guard(Requirement.FOUNDER_OR_ABOVE)
    def delete_feed(feed_id: int):
        container.feed_service.delete_feed(current_principal(), feed_id)
        return ok({"id": feed_id, "deleted": True})
