# services/submit_guard.py
"""
防重复提交：每个渲染出来的表单带一个一次性 form_token。

同一个 key（动作 + 对象 + token）在处理中或已成功完成时，acquire 返回 False；
失败时 release 掉，用户可以原样重试。
"""
from __future__ import annotations

import secrets
import threading
from collections import OrderedDict
from contextlib import contextmanager

from flask import current_app

EXTENSION_KEY = "submit_guard"


class DuplicateSubmission(Exception):
    pass


class SubmitGuard:
    def __init__(self, max_completed: int = 4096):
        self._lock = threading.Lock()
        self._in_flight: set[str] = set()
        self._completed: "OrderedDict[str, None]" = OrderedDict()
        self._max_completed = max_completed

    @staticmethod
    def issue_token() -> str:
        return secrets.token_urlsafe(16)

    def acquire(self, key: str) -> bool:
        with self._lock:
            if key in self._in_flight or key in self._completed:
                return False
            self._in_flight.add(key)
            return True

    def release(self, key: str, completed: bool = False) -> None:
        with self._lock:
            self._in_flight.discard(key)
            if completed:
                self._completed[key] = None
                while len(self._completed) > self._max_completed:
                    self._completed.popitem(last=False)

    @contextmanager
    def hold(self, key: str):
        """with guard.hold(key): ... 正常退出记为完成，抛异常则释放以便重试。"""
        if not self.acquire(key):
            raise DuplicateSubmission(key)
        try:
            yield
        except BaseException:
            self.release(key)
            raise
        self.release(key, completed=True)


def get_guard() -> SubmitGuard:
    return current_app.extensions[EXTENSION_KEY]
