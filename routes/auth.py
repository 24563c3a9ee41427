# routes/auth.py
from __future__ import annotations
from datetime import datetime
from functools import wraps

from flask import (
    Blueprint, current_app, flash, g, jsonify, redirect, render_template, request, url_for,
)
from flask_jwt_extended import (
    create_access_token,
    get_jwt,
    get_jwt_identity,
    set_access_cookies,
    unset_jwt_cookies,
    verify_jwt_in_request,
)
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import ExpiredSignatureError, PyJWTError

from extensions import db
from models.admin_user import AdminUser

auth_bp = Blueprint("auth", __name__, url_prefix="/admin")

LOGIN_FAILED_MSG = "Invalid login credentials"
SESSION_EXPIRED_MSG = "Your session has expired. Please sign in again."


def _safe_next(target: str | None) -> str | None:
    """只允许站内相对路径，防止开放重定向。"""
    if target and target.startswith("/") and not target.startswith("//"):
        return target
    return None


def _now_utc() -> datetime:
    return datetime.utcnow()


def _current_admin() -> AdminUser | None:
    """校验 cookie 里的 token 并取出管理员；未登录/过期/账号停用都抛异常或返回 None。"""
    verify_jwt_in_request()
    identity = get_jwt_identity()
    try:
        user = db.session.get(AdminUser, int(identity))
    except (TypeError, ValueError):
        return None
    if not user or not user.is_active:
        return None
    return user


def _reject(expired: bool, wants_json: bool):
    if wants_json:
        resp = jsonify({"code": "UNAUTHORIZED", "message": "authentication required"})
        resp.status_code = 401
    else:
        if expired:
            flash(SESSION_EXPIRED_MSG, "error")
        # 只有 GET 能原样回跳；POST 类动作登录后回到后台首页
        next_url = request.full_path.rstrip("?") if request.method == "GET" else None
        resp = redirect(url_for("auth.login", next=next_url))
    unset_jwt_cookies(resp)
    return resp


def admin_required(fn=None, *, json_errors: bool = False):
    """
    管理后台守卫：没有有效会话时重定向到登录页（JSON 接口返回 401）。
    使用：@admin_required 或 @admin_required(json_errors=True)
    """
    def deco(view):
        @wraps(view)
        def decorated_view(*args, **kwargs):
            expired = False
            try:
                user = _current_admin()
            except ExpiredSignatureError:
                user, expired = None, True
            except (JWTExtendedException, PyJWTError) as e:
                current_app.logger.info("admin guard rejected request to %s: %s", request.path, e)
                user = None
            if user is None:
                return _reject(expired, json_errors)
            g.admin = user
            return view(*args, **kwargs)
        return decorated_view

    if fn is not None:
        return deco(fn)
    return deco


def csrf_token() -> str:
    """模板里表单要带上的 csrf_token（来自当前已校验的 JWT）。"""
    try:
        return (get_jwt() or {}).get("csrf", "")
    except RuntimeError:
        return ""


@auth_bp.route("/login", methods=["GET", "POST"])
def login():
    next_url = _safe_next(request.values.get("next"))

    if request.method == "GET":
        # 已登录就直接进后台
        try:
            if _current_admin() is not None:
                return redirect(next_url or url_for("cases_admin.admin_list"))
        except (JWTExtendedException, PyJWTError):
            pass
        return render_template("admin/login.html", email="", error=None, next=next_url)

    email = (request.form.get("email") or "").strip().lower()
    password = request.form.get("password") or ""

    error = None
    user = None
    if not email or not password:
        error = "Email and password are required"
    else:
        user = AdminUser.query.filter_by(email=email).first()
        if not user or not user.is_active or not user.check_password(password):
            current_app.logger.warning("admin login failed for %s", email)
            error = LOGIN_FAILED_MSG
            user = None

    if error:
        return render_template("admin/login.html", email=email, error=error, next=next_url)

    user.last_login_at = _now_utc()
    db.session.commit()

    access_token = create_access_token(
        identity=str(user.id),
        additional_claims={"email": user.email},
    )
    resp = redirect(next_url or url_for("cases_admin.admin_list"))
    set_access_cookies(resp, access_token)
    current_app.logger.info("admin signed in: %s", user.email)
    return resp


@auth_bp.post("/logout")
def logout():
    resp = redirect(url_for("auth.login"))
    unset_jwt_cookies(resp)
    flash("You have been signed out.", "success")
    return resp
