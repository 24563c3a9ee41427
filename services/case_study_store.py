# services/case_study_store.py
"""
case_studies 表的读写入口。

路由层只通过这里访问数据库；任何数据库异常都会先 rollback，
再包装成 StoreError（message 为数据库原始报错），由调用方就地展示。
唯一性（slug）完全交给数据库的唯一索引，这里不做预检查。
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List

from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from extensions import db
from models.case_study import CaseStudy
from services.relevance import rank_related

logger = logging.getLogger(__name__)


class StoreError(Exception):
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


def _message_of(exc: SQLAlchemyError) -> str:
    orig = getattr(exc, "orig", None)
    return str(orig) if orig is not None else str(exc)


def _fail(exc: SQLAlchemyError, action: str) -> StoreError:
    db.session.rollback()
    if isinstance(exc, IntegrityError):
        logger.warning("case study %s rejected: %s", action, _message_of(exc))
    else:
        logger.exception("case study %s failed", action)
    return StoreError(_message_of(exc))


def _date_ordered():
    return CaseStudy.query.order_by(
        CaseStudy.date.desc(), CaseStudy.created_at.desc(), CaseStudy.id.asc()
    )


# ------- reads -------

def get_by_slug(slug: str) -> CaseStudy | None:
    try:
        return CaseStudy.query.filter_by(slug=slug).one_or_none()
    except SQLAlchemyError as e:
        raise _fail(e, "lookup") from e


def get_by_id(cid: str) -> CaseStudy | None:
    try:
        return db.session.get(CaseStudy, cid)
    except SQLAlchemyError as e:
        raise _fail(e, "lookup") from e


def list_by_date(limit: int | None = None) -> List[CaseStudy]:
    try:
        q = _date_ordered()
        if limit is not None:
            q = q.limit(limit)
        return q.all()
    except SQLAlchemyError as e:
        raise _fail(e, "list") from e


def list_for_admin() -> List[CaseStudy]:
    try:
        return CaseStudy.query.order_by(CaseStudy.created_at.desc(), CaseStudy.id.asc()).all()
    except SQLAlchemyError as e:
        raise _fail(e, "list") from e


def recent_excluding(slug: str, limit: int) -> List[CaseStudy]:
    try:
        return _date_ordered().filter(CaseStudy.slug != slug).limit(limit).all()
    except SQLAlchemyError as e:
        raise _fail(e, "list") from e


def select_related(case_study: CaseStudy) -> List[CaseStudy]:
    """详情页底部 "More case studies"：最近 N 条里按标签重合度挑前几条。"""
    window = current_app.config.get("RELATED_WINDOW", 10)
    limit = current_app.config.get("RELATED_LIMIT", 3)
    candidates = recent_excluding(case_study.slug, window)
    return rank_related(case_study.tags, candidates, limit=limit, exclude_slug=case_study.slug)


# ------- writes -------

def _apply(c: CaseStudy, payload: Dict[str, Any]) -> None:
    for k in CaseStudy.EDITABLE_FIELDS:
        if k in payload:
            setattr(c, k, payload[k])


def insert(payload: Dict[str, Any]) -> CaseStudy:
    c = CaseStudy()
    _apply(c, payload)
    try:
        db.session.add(c)
        db.session.commit()
    except SQLAlchemyError as e:
        raise _fail(e, "insert") from e
    logger.info("case study created: %s (%s)", c.slug, c.id)
    return c


def update(cid: str, payload: Dict[str, Any]) -> CaseStudy | None:
    c = get_by_id(cid)
    if c is None:
        return None
    _apply(c, payload)
    try:
        db.session.commit()
    except SQLAlchemyError as e:
        raise _fail(e, "update") from e
    logger.info("case study updated: %s (%s)", c.slug, c.id)
    return c


def delete(cid: str) -> bool:
    c = get_by_id(cid)
    if c is None:
        return False
    try:
        db.session.delete(c)
        db.session.commit()
    except SQLAlchemyError as e:
        raise _fail(e, "delete") from e
    logger.info("case study deleted: %s", cid)
    return True
