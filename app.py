# app.py
import logging

from flask import Flask, g, jsonify, render_template, request

from config import Config, validate_config
from extensions import cors, db, jwt, migrate

# ---- 导入各个蓝图 ----
from routes.auth import auth_bp, csrf_token
from routes.cases_admin import cases_admin_bp
from routes.cases_public import cases_public_bp
from routes.media_public import media_public_bp
from routes.site import site_bp
from routes.upload import upload_bp
from services.case_study_store import StoreError
from services.submit_guard import EXTENSION_KEY, SubmitGuard
from create_admin import create_admin_command


def _wants_json() -> bool:
    return request.path.startswith("/api/") or request.path == "/admin/uploads"


def create_app(overrides=None):
    app = Flask(__name__, static_folder="static", template_folder="templates")
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)
    validate_config(app.config)

    logging.basicConfig(format="%(asctime)s %(levelname)s [%(name)s] %(message)s")
    logging.getLogger().setLevel(app.config.get("LOG_LEVEL", "INFO"))
    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    # ---- 初始化扩展 ----
    db.init_app(app)
    from models.case_study import CaseStudy  # noqa: F401
    from models.admin_user import AdminUser  # noqa: F401

    jwt.init_app(app)
    migrate.init_app(app, db)
    cors.init_app(
        app,
        resources={
            r"/api/*": {
                "origins": app.config.get("CORS_ORIGINS") or [],
                "methods": ["GET", "OPTIONS"],
            }
        },
    )
    app.extensions[EXTENSION_KEY] = SubmitGuard()

    # ---- 注册蓝图 ----
    app.register_blueprint(site_bp)
    app.register_blueprint(cases_public_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(cases_admin_bp)
    app.register_blueprint(upload_bp)
    app.register_blueprint(media_public_bp)

    app.cli.add_command(create_admin_command)

    @app.context_processor
    def inject_globals():
        cfg = app.config
        return {
            "site": {
                "name": cfg.get("SITE_NAME"),
                "url": cfg.get("SITE_URL"),
                "description": cfg.get("SITE_DESCRIPTION"),
                "keywords": cfg.get("SITE_KEYWORDS") or (),
                "twitter": cfg.get("SITE_TWITTER"),
            },
            "csrf_token": csrf_token,
            "current_admin": g.get("admin"),
        }

    @app.template_filter("human_date")
    def human_date(d, short=False):
        if not d:
            return ""
        month = d.strftime("%b" if short else "%B")
        return f"{month} {d.day}, {d.year}"

    @app.after_request
    def no_store_for_admin(resp):
        if request.path.startswith("/admin"):
            resp.headers["Cache-Control"] = "no-store"
        return resp

    # ---- 错误处理 ----
    @app.errorhandler(404)
    def not_found(e):
        if _wants_json():
            return jsonify({"code": "NOT_FOUND", "message": "not found"}), 404
        return render_template("errors/404.html"), 404

    @app.errorhandler(413)
    def too_large(e):
        msg = "Error uploading image: file is too large"
        if _wants_json():
            return jsonify({"error": msg}), 413
        return render_template("errors/error.html", message=msg), 413

    @app.errorhandler(StoreError)
    def store_unavailable(e):
        if _wants_json():
            return jsonify({"code": "STORE_ERROR", "message": e.message}), 503
        return render_template("errors/error.html", message="The content store is unavailable. Please try again later."), 503

    # ---- 健康检查 ----
    @app.get("/healthz")
    def healthz():
        return jsonify({"status": "ok"})

    return app
