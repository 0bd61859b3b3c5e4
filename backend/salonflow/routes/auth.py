# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

# backend/salonflow/routes/auth.py
"""
Authentication API routes

- GET  /api/auth/barbers  public profile picker (active barbers)
- POST /api/auth/login    username/email + password, or user_id + password
- POST /api/auth/logout   revoke current token
- GET  /api/auth/me       current profile + permissions

Failed logins are written to security_events as LOGIN_FAILED.
"""

from flask import Blueprint, request, jsonify, current_app, g

from ..services import auth_service
from ..services import session_service
from ..services import permission_service
from ..decorators import require_auth
from .responses import error_response


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


@auth_bp.get("/barbers")
def login_profiles_route():
    """Public list of barbers to pick from on the sign-in screen."""
    try:
        barbers = auth_service.list_login_profiles()
        return jsonify({"barbers": [b.to_profile_card() for b in barbers]}), 200
    except Exception as e:
        return error_response(e, "list login profiles")


@auth_bp.post("/login")
def login_route():
    """
    Authenticate user and create session token.

    Body: {"username"|"email"|"identifier", "password"} or {"user_id", "password"}
    Token must be included in Authorization header for protected routes.
    """
    try:
        data = request.get_json(silent=True) or {}
        user_id = data.get("user_id")
        identifier = data.get("username") or data.get("email") or data.get("identifier")
        password = data.get("password")

        if not password or not (user_id or identifier):
            return jsonify({"error": "username/email (or user_id) and password required"}), 400

        user_agent = request.headers.get("User-Agent")
        ip_address = request.remote_addr

        if user_id:
            user = auth_service.authenticate_profile(user_id, password)
        else:
            user = auth_service.authenticate(identifier, password)

        if not user:
            permission_service.log_security_event(
                user_id=None,
                event_type="LOGIN_FAILED",
                success=False,
                resource=request.path,
                action="LOGIN",
                reason=f"Invalid credentials for {user_id or identifier}",
                ip_address=ip_address,
                user_agent=user_agent,
            )
            return jsonify({"error": "Invalid credentials"}), 401

        session, token = session_service.create_session(
            user_id=user.id,
            user_agent=user_agent,
            ip_address=ip_address
        )
        permissions = sorted(permission_service.get_user_permissions(user.id))

        return jsonify({
            "user": user.to_dict(),
            "permissions": permissions,
            "token": token,
            "session": session.to_dict(),
            "message": "Login successful"
        }), 200

    except Exception:
        current_app.logger.exception("Failed to login user")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.post("/logout")
@require_auth
def logout_route():
    """Revoke the token used for this request."""
    try:
        session_service.revoke_session(g.session_token, reason="User logout")
        return jsonify({"message": "Logged out"}), 200
    except Exception:
        current_app.logger.exception("Failed to logout user")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.get("/me")
@require_auth
def me_route():
    user = g.current_user
    return jsonify({
        "user": user.to_dict(),
        "permissions": sorted(permission_service.get_user_permissions(user.id)),
    }), 200
