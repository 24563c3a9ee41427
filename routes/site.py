# routes/site.py
from flask import Blueprint, abort, current_app, g, render_template

from services import case_study_store as store
from services.authors import get_author
from services.markdown_render import render_markdown

site_bp = Blueprint("site", __name__)

LIST_ERROR_MSG = "Error loading case studies. Please try again later."


@site_bp.after_request
def _revalidate(resp):
    # 公开页允许最多 REVALIDATE_SECONDS 秒的缓存；拉取失败的降级页不缓存
    if g.get("store_failed"):
        resp.headers["Cache-Control"] = "no-store"
    elif resp.status_code == 200:
        seconds = current_app.config.get("REVALIDATE_SECONDS", 60)
        resp.headers["Cache-Control"] = f"public, max-age={seconds}, s-maxage={seconds}"
    return resp


@site_bp.get("/")
def index():
    error = None
    try:
        items = store.list_by_date()
    except store.StoreError:
        items, error = [], LIST_ERROR_MSG
        g.store_failed = True
    return render_template("index.html", items=items, error=error)


@site_bp.get("/case-studies/<slug>")
def case_study_detail(slug):
    c = store.get_by_slug(slug)
    if c is None:
        abort(404)

    rendered = render_markdown(c.content)
    try:
        related = store.select_related(c)
    except store.StoreError:
        # 相关推荐拉取失败就不显示这一块
        related = []
        g.store_failed = True

    return render_template(
        "case_study.html",
        case_study=c,
        body=rendered.html,
        toc=rendered.toc,
        author=get_author(c.author),
        related=related,
    )
