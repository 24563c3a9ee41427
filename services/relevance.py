# services/relevance.py
"""
相关案例排序：按与当前案例共享的标签数降序，同分按日期降序，取前 N 条。

候选集合由调用方准备好（一般是最近的 10 条，已排除当前案例），
这里只做打分和排序，无副作用。
"""
from __future__ import annotations

from datetime import date
from typing import Any, Iterable, List, Sequence

DEFAULT_LIMIT = 3


def shared_tag_count(current_tags: Sequence[str], candidate_tags: Iterable[str] | None) -> int:
    """精确匹配、区分大小写，不做任何归一化。"""
    pool = set(candidate_tags or [])
    return sum(1 for tag in current_tags if tag in pool)


def _date_key(item: Any) -> date:
    d = getattr(item, "date", None)
    return d if d is not None else date.min


def rank_related(
    current_tags: Sequence[str] | None,
    candidates: Iterable[Any],
    limit: int = DEFAULT_LIMIT,
    exclude_slug: str | None = None,
) -> List[Any]:
    current_tags = list(current_tags or [])
    scored = [
        (shared_tag_count(current_tags, getattr(c, "tags", None)), _date_key(c), c)
        for c in candidates
        if exclude_slug is None or getattr(c, "slug", None) != exclude_slug
    ]
    # sort 是稳定的，完全同分同日期时保持候选原顺序
    scored.sort(key=lambda t: (t[0], t[1]), reverse=True)
    return [c for _, _, c in scored[:max(0, limit)]]
