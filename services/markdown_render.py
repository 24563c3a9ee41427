# services/markdown_render.py
"""把案例正文的 markdown 渲染成 HTML，同时产出目录（标题带 id，可用 #锚点 跳转）。"""
from __future__ import annotations

import xml.etree.ElementTree as etree
from dataclasses import dataclass, field
from typing import Any, Dict, List

from markdown import Markdown
from markdown.extensions import Extension
from markdown.treeprocessors import Treeprocessor
from markupsafe import Markup


class _LinksAndTables(Treeprocessor):
    """外链新窗口打开；表格外面包一层 div 便于横向滚动。"""

    def run(self, root):
        for a in root.iter("a"):
            if (a.get("href") or "").startswith("http"):
                a.set("target", "_blank")
                a.set("rel", "noopener noreferrer")

        for parent in list(root.iter()):
            for idx, child in enumerate(list(parent)):
                if child.tag != "table":
                    continue
                wrapper = etree.Element("div", {"class": "table-wrap"})
                wrapper.tail, child.tail = child.tail, None
                parent.remove(child)
                parent.insert(idx, wrapper)
                wrapper.append(child)


class CaseStudyMarkdownExtension(Extension):
    def extendMarkdown(self, md):
        md.treeprocessors.register(_LinksAndTables(md), "case_study_links_tables", 4)


@dataclass
class RenderedContent:
    html: Markup
    toc: List[Dict[str, Any]] = field(default_factory=list)


def _flatten(tokens, out=None):
    out = [] if out is None else out
    for t in tokens:
        out.append({"level": t["level"], "id": t["id"], "name": t["name"]})
        _flatten(t.get("children") or [], out)
    return out


def render_markdown(content: str) -> RenderedContent:
    md = Markdown(
        extensions=["extra", "sane_lists", "toc", CaseStudyMarkdownExtension()],
        extension_configs={"toc": {"toc_depth": "1-3"}},
        output_format="html",
    )
    html = md.convert(content or "")
    return RenderedContent(html=Markup(html), toc=_flatten(getattr(md, "toc_tokens", [])))
