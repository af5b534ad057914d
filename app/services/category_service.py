from __future__ import annotations

from sqlalchemy import delete as sql_delete
from sqlalchemy import update as sql_update
from sqlalchemy.orm import Session

from app.core.error_codes import ErrorCode
from app.core.errors import ApiError
from app.core.security import now_utc
from app.db import repository
from app.db.session import transaction
from app.models import Category, Course


def get_category_or_404(db: Session, category_id: str) -> Category:
    category = repository.get_category(db, category_id)
    if not category:
        raise ApiError(ErrorCode.CATEGORY_NOT_FOUND)
    return category


def list_categories(db: Session) -> list[Category]:
    return repository.list_categories(db)


def create_category(db: Session, name: str) -> Category:
    category = Category(name=name.strip())
    with transaction(db):
        db.add(category)
    db.refresh(category)
    return category


def update_category_name(db: Session, category_id: str, name: str) -> Category:
    category = get_category_or_404(db, category_id)
    with transaction(db):
        category.name = name.strip()
    return category


def delete_category(db: Session, category_id: str) -> Category:
    """Delete a category and detach it from its courses.

    A published course needs a category, so detached courses are unpublished.
    """
    category = get_category_or_404(db, category_id)
    with transaction(db):
        db.execute(
            sql_update(Course)
            .where(Course.category_id == category.id)
            .values(category_id=None, publish_flag=False, update_date=now_utc())
        )
        db.execute(sql_delete(Category).where(Category.id == category.id))
    return category
