import uuid
import logging
from datetime import datetime
from sqlalchemy.orm import Session
from app.models.adventure_category import AdventureCategory
from app.services.adventure_service import UNCATEGORIZED, get_category, list_adventures, make_slug

logger = logging.getLogger(__name__)

UNCATEGORIZED_GROUP = {
    "id": UNCATEGORIZED,
    "slug": UNCATEGORIZED,
    "title": "Alte Aventuri",
    "description": "Aventuri care nu sunt încă organizate în categorii",
    "image": "/placeholder-category.jpg",
}


def create_category(db: Session, title: str, description: str = "", image: str = "") -> AdventureCategory:
    title = (title or "").strip()
    if not title:
        raise ValueError("title is required")
    slug = make_slug(title)
    if slug == UNCATEGORIZED or get_category(db, slug):
        raise ValueError(f"Category slug already exists: {slug}")
    category = AdventureCategory(
        id=str(uuid.uuid4()),
        slug=slug,
        title=title,
        description=(description or "").strip(),
        image=image or "",
    )
    db.add(category)
    db.commit()
    db.refresh(category)
    logger.info("Created adventure category %s", slug)
    return category


def category_to_dict(c: AdventureCategory) -> dict:
    return {"id": c.id, "slug": c.slug, "title": c.title, "description": c.description or "", "image": c.image or ""}


def list_categories(db: Session) -> list[dict]:
    return [category_to_dict(c) for c in db.query(AdventureCategory).order_by(AdventureCategory.title.asc()).all()]


def adventures_by_category_slug(db: Session, slug: str, now: datetime | None = None) -> dict | None:
    """Category header plus its adventures. None when the slug is unknown."""
    if slug == UNCATEGORIZED:
        category = dict(UNCATEGORIZED_GROUP)
    else:
        c = get_category(db, slug)
        if not c:
            return None
        category = category_to_dict(c)
    return {"category": category, "adventures": list_adventures(db, category=slug, now=now)}


def adventures_grouped_by_category(db: Session, now: datetime | None = None) -> list[dict]:
    """Categories by title with their adventures. Empty categories are left out; uncategorized goes last."""
    groups = []
    for c in db.query(AdventureCategory).order_by(AdventureCategory.title.asc()).all():
        adventures = list_adventures(db, category=c.slug, now=now)
        if adventures:
            groups.append({"category": category_to_dict(c), "adventures": adventures})
    rest = list_adventures(db, category=UNCATEGORIZED, now=now)
    if rest:
        groups.append({"category": dict(UNCATEGORIZED_GROUP), "adventures": rest})
    return groups
