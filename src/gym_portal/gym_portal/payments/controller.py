from __future__ import annotations

from flask import Flask, jsonify

from ..common.web import current_user_id, error_response, json_body, roles_required, server_error
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import DomainError, ValidationError
from .model import PaymentForm


def register(app: Flask, container: Container) -> None:
    service = container.payment_service

    @app.route("/api/member/payments", methods=["GET"], endpoint="api_member_payments")
    @roles_required(Role.MEMBER)
    def list_payments():
        try:
            payments = service.list_payments(current_user_id())
        except Exception:
            return server_error("Failed to load payments")
        return jsonify({"success": True, "data": [p.to_dict() for p in payments]})

    @app.route("/api/member/payments", methods=["POST"], endpoint="api_member_pay")
    @roles_required(Role.MEMBER)
    def pay():
        data = json_body()
        try:
            plan_id = data.get("membership_plan_id")
            if plan_id is not None and not str(plan_id).isdigit():
                raise ValidationError("membership_plan_id must be a number")
            receipt = service.pay(
                current_user_id(),
                PaymentForm.from_dict(data),
                plan_id=int(plan_id) if plan_id is not None else None,
            )
        except DomainError as e:
            return error_response(e)
        return jsonify({
            "success": True,
            "message": "Payment successful! You are now subscribed to the membership.",
            "data": receipt.to_dict(),
        }), 201
