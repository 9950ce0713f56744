from __future__ import annotations

import hashlib
import json
import logging
import re
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import List

from slugify import slugify
from sqlmodel import select

from ..models import TemplateRecord, get_session, init_db
from .schema import Template

logger = logging.getLogger(__name__)


def slug_from_name(name: str) -> str:
    slug = slugify(name)
    slug = re.sub(r"[^a-z0-9-]+", "-", slug.lower()).strip("-")
    if not slug:
        slug = hashlib.md5(name.encode("utf-8")).hexdigest()[:12]
    if ".." in slug or "/" in slug or "\\" in slug:
        raise ValueError("Invalid slug generated from name")
    return slug


def _record_for(session, slug: str) -> TemplateRecord | None:
    return session.exec(select(TemplateRecord).where(TemplateRecord.slug == slug)).first()


def save_template(template: Template) -> Template:
    """Insert the template, or store it as the next version of an existing one."""
    init_db()
    slug = slug_from_name(template.id or template.name)
    with get_session() as session:
        record = _record_for(session, slug)
        if record is None:
            saved = replace(template, id=slug, version=1)
            record = TemplateRecord(slug=slug, name=saved.name, kind=saved.kind, payload="")
        else:
            saved = replace(template, id=slug, version=record.version + 1)
            record.name = saved.name
            record.kind = saved.kind
            record.updated_at = datetime.utcnow()
        record.version = saved.version
        record.payload = json.dumps(saved.to_dict(), ensure_ascii=False)
        session.add(record)
        session.commit()
    logger.info("Saved template %s (version %s)", slug, saved.version)
    return saved


def load_template(slug: str) -> Template:
    init_db()
    with get_session() as session:
        record = _record_for(session, slug)
        if record is None:
            raise LookupError(f"Template not found: {slug}")
        return Template.from_dict(json.loads(record.payload))


def list_templates(kind: str | None = None) -> List[TemplateRecord]:
    init_db()
    with get_session() as session:
        statement = select(TemplateRecord).order_by(TemplateRecord.slug)
        if kind:
            statement = statement.where(TemplateRecord.kind == kind)
        return list(session.exec(statement))


def delete_template(slug: str) -> None:
    init_db()
    with get_session() as session:
        record = _record_for(session, slug)
        if record is None:
            raise LookupError(f"Template not found: {slug}")
        session.delete(record)
        session.commit()


def import_template(path: Path) -> Template:
    if not path.exists():
        raise FileNotFoundError(f"Template file not found: {path}")
    with path.open("r", encoding="utf-8") as handle:
        data = json.load(handle)
    template = Template.from_dict(data)
    if not template.id:
        template = replace(template, id=slug_from_name(template.name or path.stem))
    return save_template(template)
