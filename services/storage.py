# services/storage.py
"""
对象存储：把上传的缩略图写到 MEDIA_ROOT/<bucket>/<key>，
公开地址为 MEDIA_URL_PREFIX/<bucket>/<key>（由 routes/media_public.py 提供）。
"""
from __future__ import annotations

import logging
import os
import secrets
import string
import time

from flask import current_app
from werkzeug.utils import secure_filename

logger = logging.getLogger(__name__)

_BASE36 = string.digits + string.ascii_lowercase


class StorageError(Exception):
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


def _extension(filename: str) -> str:
    name = secure_filename(filename or "")
    _, ext = os.path.splitext(name)
    return ext.lstrip(".").lower()


def object_key(filename: str, prefix: str = "thumbnails", now_ms: int | None = None) -> str:
    """thumbnails/<毫秒时间戳>-<6 位随机 base36>.<原扩展名>"""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    suffix = "".join(secrets.choice(_BASE36) for _ in range(6))
    ext = _extension(filename)
    name = f"{now_ms}-{suffix}" + (f".{ext}" if ext else "")
    return f"{prefix}/{name}"


class LocalObjectStorage:
    def __init__(self, root: str, url_prefix: str, bucket: str, allowed_extensions=None):
        self.root = os.path.abspath(root)
        self.url_prefix = url_prefix.rstrip("/")
        self.bucket = bucket
        self.allowed_extensions = tuple(allowed_extensions or ())

    @classmethod
    def from_app(cls, app=None) -> "LocalObjectStorage":
        cfg = (app or current_app).config
        return cls(
            cfg["MEDIA_ROOT"],
            cfg.get("MEDIA_URL_PREFIX", "/media"),
            cfg.get("STORAGE_BUCKET", "case-studies"),
            cfg.get("ALLOWED_IMAGE_EXTENSIONS"),
        )

    def _path(self, key: str) -> str:
        if ".." in key.split("/") or key.startswith("/"):
            raise StorageError("Invalid object key")
        return os.path.join(self.root, self.bucket, *key.split("/"))

    def check_filename(self, filename: str) -> None:
        if not filename:
            raise StorageError("No file selected")
        ext = _extension(filename)
        if self.allowed_extensions and ext not in self.allowed_extensions:
            raise StorageError(f"Unsupported file type: .{ext}" if ext else "File has no extension")

    def upload(self, key: str, fileobj) -> str:
        """写入对象，key 已存在时报错（不覆盖）。返回 key。"""
        path = self._path(key)
        if os.path.exists(path):
            raise StorageError("The resource already exists")
        try:
            os.makedirs(os.path.dirname(path), exist_ok=True)
            if hasattr(fileobj, "save"):
                fileobj.save(path)
            else:
                with open(path, "wb") as fh:
                    fh.write(fileobj.read())
        except OSError as e:
            logger.exception("upload failed: %s", key)
            raise StorageError(f"Could not store file: {e.strerror or e}") from e
        logger.info("object stored: %s/%s", self.bucket, key)
        return key

    def public_url(self, key: str) -> str:
        return f"{self.url_prefix}/{self.bucket}/{key}"


def upload_thumbnail(file) -> str:
    """校验 -> 生成 key -> 写入 -> 返回公开 URL。"""
    storage = LocalObjectStorage.from_app()
    storage.check_filename(getattr(file, "filename", ""))
    key = storage.upload(object_key(file.filename), file)
    return storage.public_url(key)
