# services/case_study_form.py
"""后台表单状态：slug 生成、标签解析、校验、组装写库 payload。"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List

_non_alnum_re = re.compile(r"[^a-z0-9]+")

DEFAULT_CONTENT = """## Client Information

**Client:** Client Name — Company
**Industry:** Industry Name
**Project Value:** $X,XXX
**Platform:** [example.com](https://example.com)

---

## The Challenge

Describe the client's challenge here.

### Pain Points:

- Pain point 1
- Pain point 2
- Pain point 3

---

## The Solution

Describe the solution you provided.

### Key Features Implemented:

- **Feature 1:** Description
- **Feature 2:** Description
- **Feature 3:** Description

---

## Measurable Results

> "Client testimonial quote here."
>
> — **Client Name, Title**

---

## Technical Excellence

| Metric | Result |
|--------|--------|
| **Performance** | Value |
| **Cost** | Value |
| **Availability** | Value |
"""


def slugify(title: str) -> str:
    """小写，非字母数字的连续片段压成一个 '-'，去掉首尾 '-'。对结果再调用结果不变。"""
    return _non_alnum_re.sub("-", (title or "").lower()).strip("-")


def parse_tags(raw: str | None) -> List[str]:
    out: List[str] = []
    for part in (raw or "").split(","):
        tag = part.strip()
        if tag and tag not in out:
            out.append(tag)
    return out


def _parse_date(raw: str) -> date | None:
    try:
        return date.fromisoformat(raw)
    except (TypeError, ValueError):
        return None


@dataclass
class CaseStudyForm:
    mode: str = "create"          # create / edit
    slug: str = ""
    title: str = ""
    description: str = ""
    date: str = field(default_factory=lambda: date.today().isoformat())
    tags: str = ""                # 逗号分隔的原始输入
    featured: bool = False
    read_time: str = ""
    author: str = ""
    thumbnail: str = ""
    content: str = DEFAULT_CONTENT
    errors: List[str] = field(default_factory=list)

    @property
    def is_create(self) -> bool:
        return self.mode == "create"

    @classmethod
    def blank(cls, default_author: str = "") -> "CaseStudyForm":
        return cls(mode="create", author=default_author)

    @classmethod
    def from_record(cls, c) -> "CaseStudyForm":
        return cls(
            mode="edit",
            slug=c.slug or "",
            title=c.title or "",
            description=c.description or "",
            date=c.date.isoformat() if c.date else "",
            tags=", ".join(c.tags or []),
            featured=bool(c.featured),
            read_time=c.read_time or "",
            author=c.author or "",
            thumbnail=c.thumbnail or "",
            content=c.content or "",
        )

    @classmethod
    def from_request(cls, form, mode: str) -> "CaseStudyForm":
        f = cls(
            mode=mode,
            slug=(form.get("slug") or "").strip(),
            title=(form.get("title") or "").strip(),
            description=(form.get("description") or "").strip(),
            date=(form.get("date") or "").strip(),
            tags=form.get("tags") or "",
            featured=form.get("featured") in ("on", "true", "1", "yes"),
            read_time=(form.get("read_time") or "").strip(),
            author=(form.get("author") or "").strip(),
            thumbnail=(form.get("thumbnail") or "").strip(),
            content=form.get("content") or "",
        )
        # 新建时 slug 留空就按标题生成；编辑时 slug 完全手动
        if f.is_create and not f.slug:
            f.slug = slugify(f.title)
        return f

    def validate(self) -> bool:
        self.errors = []
        if not self.title:
            self.errors.append("Title is required.")
        if not self.slug:
            self.errors.append("Slug is required.")
        if not self.description:
            self.errors.append("Description is required.")
        if _parse_date(self.date) is None:
            self.errors.append("Date must be a valid date (YYYY-MM-DD).")
        return not self.errors

    def to_payload(self) -> Dict[str, Any]:
        return {
            "slug": self.slug,
            "title": self.title,
            "description": self.description,
            "date": _parse_date(self.date),
            "tags": parse_tags(self.tags),
            "featured": self.featured,
            "read_time": self.read_time or None,
            "author": self.author or None,
            "thumbnail": self.thumbnail or None,
            "content": self.content,
        }
