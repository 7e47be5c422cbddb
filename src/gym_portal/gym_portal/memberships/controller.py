from __future__ import annotations

from flask import Flask, jsonify, request, session

from ..common.web import (
    current_user_id,
    error_response,
    json_body,
    login_required,
    page_to_dict,
    query_bool,
    query_int,
    roles_required,
    server_error,
)
from ..common.validators import require_positive_int
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import DomainError


def register(app: Flask, container: Container) -> None:
    service = container.membership_service

    @app.route("/api/memberships", methods=["GET"], endpoint="api_memberships")
    @login_required
    def list_plans():
        page = service.list_plans(
            is_active=query_bool("is_active"),
            search=request.args.get("search", ""),
            category=request.args.get("category") or None,
            page=query_int("page", 1),
            per_page=query_int("per_page", 5),
        )

        if session.get("role") == Role.MEMBER.value:
            subscriptions = service.subscriptions_for(current_user_id())

            def serialize(plan):
                data = plan.to_dict()
                data["action_label"] = service.plan_action_label(plan, subscriptions)
                return data
        else:
            def serialize(plan):
                return plan.to_dict()

        return jsonify(page_to_dict(page, serialize))

    @app.route("/api/memberships", methods=["POST"], endpoint="api_memberships_create")
    @roles_required(Role.ADMIN)
    def create_plan():
        try:
            plan = service.create_plan(json_body())
        except DomainError as e:
            return error_response(e)
        return jsonify({"success": True, "data": plan.to_dict()}), 201

    @app.route("/api/memberships/<int:plan_id>", methods=["PUT"], endpoint="api_memberships_update")
    @roles_required(Role.ADMIN)
    def update_plan(plan_id: int):
        try:
            plan = service.update_plan(plan_id, json_body())
        except DomainError as e:
            return error_response(e)
        return jsonify({"success": True, "data": plan.to_dict()})

    @app.route("/api/memberships/<int:plan_id>", methods=["DELETE"], endpoint="api_memberships_delete")
    @roles_required(Role.ADMIN)
    def delete_plan(plan_id: int):
        try:
            service.delete_plan(plan_id)
        except DomainError as e:
            return error_response(e)
        except Exception:
            return server_error("Failed to delete membership plan")
        return jsonify({"success": True})

    @app.route("/api/memberships/subscribe", methods=["POST"], endpoint="api_memberships_subscribe")
    @roles_required(Role.MEMBER)
    def subscribe():
        try:
            plan_id = require_positive_int(json_body().get("membership_plan_id"), "membership_plan_id")
            sub = service.subscribe(current_user_id(), plan_id)
        except DomainError as e:
            return error_response(e)
        return jsonify({"success": True, "data": sub.to_dict()}), 201

    @app.route("/api/my-membership", methods=["GET"], endpoint="api_my_membership")
    @roles_required(Role.MEMBER)
    def my_membership():
        return jsonify(service.my_membership(current_user_id()))
