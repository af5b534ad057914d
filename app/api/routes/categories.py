from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.admin_auth import require_admin
from app.api.deps import get_current_user
from app.db.session import get_db
from app.models import Category
from app.schemas.categories import CategoryListResponse, CategoryNameRequest, CategoryResponse
from app.services import category_service

router = APIRouter(prefix="/v1/categories", tags=["categories"])


def category_response(category: Category) -> CategoryResponse:
    return CategoryResponse(id=category.id, name=category.name)


@router.get("", response_model=CategoryListResponse, dependencies=[Depends(get_current_user)])
def list_categories(db: Session = Depends(get_db)) -> CategoryListResponse:
    return CategoryListResponse(categories=[category_response(c) for c in category_service.list_categories(db)])


@router.post("", response_model=CategoryResponse, status_code=201, dependencies=[Depends(require_admin)])
def create_category(payload: CategoryNameRequest, db: Session = Depends(get_db)) -> CategoryResponse:
    return category_response(category_service.create_category(db, payload.name))


@router.put("/{category_id}", response_model=CategoryResponse, dependencies=[Depends(require_admin)])
def update_category(category_id: str, payload: CategoryNameRequest, db: Session = Depends(get_db)) -> CategoryResponse:
    return category_response(category_service.update_category_name(db, category_id, payload.name))


@router.delete("/{category_id}", response_model=CategoryResponse, dependencies=[Depends(require_admin)])
def delete_category(category_id: str, db: Session = Depends(get_db)) -> CategoryResponse:
    return category_response(category_service.delete_category(db, category_id))
