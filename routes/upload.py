from flask import Blueprint, current_app, jsonify, request

from routes.auth import admin_required
from services.storage import StorageError, upload_thumbnail
from services.submit_guard import get_guard

upload_bp = Blueprint("upload", __name__)


@upload_bp.post("/admin/uploads")
@admin_required(json_errors=True)
def upload_image():
    """
    后台表单里选择图片后异步上传：
      入参：multipart，字段 file + form_token
      返回：{"url": "/media/case-studies/thumbnails/..."}，前端回填到缩略图输入框
    """
    file = request.files.get("file")
    token = (request.form.get("form_token") or "").strip()
    if not file or not file.filename:
        return jsonify({"error": "No file selected"}), 400

    # 同一个 token 可以多次上传不同文件，只拦截同一文件的并发重复提交
    key = f"upload:{file.filename}:{token}" if token else None
    guard = get_guard()
    if key and not guard.acquire(key):
        return jsonify({"error": "Upload already in progress"}), 409

    try:
        url = upload_thumbnail(file)
    except StorageError as e:
        current_app.logger.warning("thumbnail upload rejected: %s", e.message)
        return jsonify({"error": f"Error uploading image: {e.message}"}), 400
    finally:
        if key:
            guard.release(key)

    return jsonify({"url": url})
