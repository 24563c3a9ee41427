# routes/media_public.py
from flask import Blueprint, abort, current_app, send_from_directory

media_public_bp = Blueprint("media_public", __name__)


@media_public_bp.route("/media/<path:subpath>")
def media_serve(subpath: str):
    # 简单防护：不允许越权访问
    if ".." in subpath.split("/") or subpath.startswith("/"):
        abort(400)
    max_age = 60 * 60 * 24 * 30
    return send_from_directory(current_app.config["MEDIA_ROOT"], subpath, max_age=max_age)
