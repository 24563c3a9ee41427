import uuid
from datetime import datetime

from extensions import db


def _new_id() -> str:
    return str(uuid.uuid4())


class CaseStudy(db.Model):
    __tablename__ = "case_studies"

    id = db.Column(db.String(36), primary_key=True, default=_new_id)
    slug = db.Column(db.String(200), unique=True, nullable=False, index=True)
    title = db.Column(db.String(300), nullable=False)
    description = db.Column(db.Text, nullable=False)
    date = db.Column(db.Date, nullable=False, index=True)
    tags = db.Column(db.JSON, nullable=False, default=list)   # ["Real Estate", "Voice AI", ...]
    featured = db.Column(db.Boolean, nullable=False, default=False)
    read_time = db.Column(db.String(50))                       # 自由文本，如 "5 min read"
    author = db.Column(db.String(80))                          # 作者表里的 key
    thumbnail = db.Column(db.String(1024))
    content = db.Column(db.Text, nullable=False, default="")
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    # 表单可写字段；id / created_at / updated_at 由库维护
    EDITABLE_FIELDS = (
        "slug", "title", "description", "date", "tags", "featured",
        "read_time", "author", "thumbnail", "content",
    )

    def to_dict(self, with_content=True):
        d = {
            "id": self.id,
            "slug": self.slug,
            "title": self.title,
            "description": self.description,
            "date": self.date.isoformat() if self.date else None,
            "tags": list(self.tags or []),
            "featured": bool(self.featured),
            "read_time": self.read_time,
            "author": self.author,
            "thumbnail": self.thumbnail,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
        if with_content:
            d["content"] = self.content
        return d

    def __repr__(self):
        return f"<CaseStudy {self.slug}>"
