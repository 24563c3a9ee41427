# services/authors.py
from flask import current_app


def _table():
    return current_app.config.get("AUTHORS") or {}


def is_valid_author(key) -> bool:
    return bool(key) and key in _table()


def get_author(key):
    """未知 key 返回 None，模板里据此决定是否显示作者卡片。"""
    if not is_valid_author(key):
        return None
    return _table()[key]
