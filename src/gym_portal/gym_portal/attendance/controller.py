from __future__ import annotations

import io
from typing import Optional

import qrcode
from flask import Flask, jsonify, request, send_file
from PIL import Image

from ..common.web import (
    current_user_id,
    error_response,
    json_body,
    page_to_dict,
    query_int,
    roles_required,
    server_error,
)
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import DomainError, ValidationError
from .service import AttendanceService


def member_qr_token(prefix: str, user_id: int) -> str:
    return f"{prefix}:{int(user_id)}"


def parse_member_qr_token(prefix: str, token: str) -> int:
    head, _, tail = (token or "").strip().partition(":")
    if head != prefix or not tail.isdigit():
        raise ValidationError("Invalid or expired QR code")
    return int(tail)


def render_qr_png(data: str) -> io.BytesIO:
    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_L,
        box_size=10,
        border=2,
    )
    qr.add_data(data)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    buf.seek(0)
    return buf


def decode_qr_image(stream) -> Optional[str]:
    # pyzbar needs the zbar shared library; only load it for image uploads
    from pyzbar.pyzbar import decode as pyzbar_decode

    img = Image.open(stream).convert("RGB")
    decoded = pyzbar_decode(img)
    if not decoded:
        return None
    return decoded[0].data.decode("utf-8").strip()


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service

    @app.route("/api/attendances", methods=["GET"], endpoint="api_attendances")
    @roles_required(Role.ADMIN)
    def list_attendances():
        try:
            page = service.list_attendances(
                status=request.args.get("status") or None,
                search=request.args.get("search", ""),
                page=query_int("page", 1),
            )
        except DomainError as e:
            return error_response(e)
        return jsonify(page_to_dict(page, AttendanceService.to_ui))

    @app.route("/api/attendances/stats", methods=["GET"], endpoint="api_attendance_stats")
    @roles_required(Role.ADMIN)
    def attendance_stats():
        try:
            return jsonify(service.stats().to_dict())
        except Exception:
            return server_error("Failed to compute attendance stats")

    @app.route("/api/attendances/check-in", methods=["POST"], endpoint="api_check_in")
    @roles_required(Role.ADMIN)
    def check_in():
        data = json_body()
        try:
            if data.get("user_id") is None:
                raise ValidationError("user_id is required")
            record = service.check_in(
                int(data["user_id"]),
                booking_id=int(data["booking_id"]) if data.get("booking_id") else None,
                verification_method=data.get("verification_method") or "manual",
                location=data.get("location"),
                notes=data.get("notes"),
                status=data.get("status"),
            )
        except DomainError as e:
            return error_response(e)
        except (TypeError, ValueError):
            return jsonify({"success": False, "error": "validation_error", "message": "Invalid check-in data"}), 400
        return jsonify({"success": True, "data": AttendanceService.to_ui(record)}), 201

    @app.route("/api/attendances/<int:attendance_id>/check-out", methods=["POST"], endpoint="api_check_out")
    @roles_required(Role.ADMIN)
    def check_out(attendance_id: int):
        try:
            record = service.check_out(attendance_id)
        except DomainError as e:
            return error_response(e)
        return jsonify({"success": True, "data": AttendanceService.to_ui(record)})

    @app.route("/api/attendances/check-in/qr", methods=["POST"], endpoint="api_check_in_qr")
    @roles_required(Role.ADMIN)
    def check_in_qr():
        """Scan a member QR code (JSON `code` or uploaded `image`) and toggle check-in/out."""

        prefix = app.config["QR_TOKEN_PREFIX"]
        try:
            if "image" in request.files:
                code = decode_qr_image(request.files["image"].stream)
                if not code:
                    raise ValidationError("No QR code found in the image")
            else:
                code = str(json_body().get("code", "")).strip()
                if not code:
                    raise ValidationError("QR code is required")

            user_id = parse_member_qr_token(prefix, code)
            action, record = service.toggle_by_qr(user_id, location=request.form.get("location") or json_body().get("location"))
        except DomainError as e:
            return error_response(e)
        except Exception:
            return server_error("QR check-in failed")

        return jsonify({"success": True, "action": action, "data": AttendanceService.to_ui(record)})

    @app.route("/api/me/qr", methods=["GET"], endpoint="api_my_qr")
    @roles_required(Role.MEMBER)
    def my_qr():
        """PNG of the member's personal check-in QR code."""

        try:
            buf = render_qr_png(member_qr_token(app.config["QR_TOKEN_PREFIX"], current_user_id()))
        except Exception:
            return server_error("Failed to render QR code")
        return send_file(buf, mimetype="image/png")
