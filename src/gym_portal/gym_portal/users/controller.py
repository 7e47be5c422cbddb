from __future__ import annotations

from flask import Flask, jsonify, request, session

from ..common.web import (
    current_user_id,
    error_response,
    json_body,
    login_required,
    page_to_dict,
    query_int,
    roles_required,
    server_error,
)
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import DomainError


def register(app: Flask, container: Container) -> None:
    @app.route("/login", methods=["POST"], endpoint="login")
    def login():
        data = json_body()
        try:
            user = container.auth_service.authenticate(data.get("email", ""), data.get("password", ""))
        except DomainError as e:
            return error_response(e)

        session.clear()
        session["user_id"] = user.user_id
        session["name"] = user.name
        session["email"] = user.email
        session["role"] = user.role.value
        return jsonify({
            "success": True,
            "user": {"id": user.user_id, "name": user.name, "email": user.email, "role": user.role.value},
        })

    @app.route("/logout", methods=["POST"], endpoint="logout")
    def logout():
        session.clear()
        return jsonify({"success": True})

    @app.route("/api/me", endpoint="api_me")
    @login_required
    def me():
        payload = {
            "id": current_user_id(),
            "name": session.get("name"),
            "email": session.get("email"),
            "role": session.get("role"),
        }
        if session.get("role") == Role.MEMBER.value:
            entitlement = container.membership_service.entitlement_for(current_user_id())
            payload["membership"] = entitlement.to_dict()
        return jsonify(payload)

    @app.route("/api/members", endpoint="api_members")
    @roles_required(Role.ADMIN, Role.TRAINER)
    def members():
        try:
            page = container.member_directory.list_members(
                status=request.args.get("status", "all"),
                search=request.args.get("search", ""),
                page=query_int("page", 1),
            )
        except DomainError as e:
            return error_response(e)
        except Exception:
            return server_error("Failed to load members")
        return jsonify(page_to_dict(page, lambda m: m.to_dict()))
