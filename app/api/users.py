from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.api.deps import get_db, require_role
from app.config import settings
from app.schemas.common import Envelope, ListResponse
from app.schemas.user import UserCreate, UserRead, UserUpdate
from app.services import user as user_service
from app.services.response import envelope

router = APIRouter(prefix="/users", tags=["users"])


@router.post(
    "",
    response_model=Envelope[UserRead],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_role("admin"))],
)
def create_user(payload: UserCreate, db: Session = Depends(get_db)):
    return envelope(user_service.users.create(db, payload))


@router.get("/{user_id}", response_model=Envelope[UserRead])
def get_user(user_id: str, db: Session = Depends(get_db)):
    return envelope(user_service.users.get(db, user_id))


@router.get("", response_model=ListResponse[UserRead])
def list_users(
    role: str | None = None,
    search: str | None = None,
    order_by: str = Query(default="name"),
    order_dir: str = Query(default="asc", pattern="^(asc|desc)$"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(
        default=settings.default_page_size, ge=1, le=settings.max_page_size
    ),
    db: Session = Depends(get_db),
):
    return user_service.users.list_response(
        db,
        role,
        search,
        order_by=order_by,
        order_dir=order_dir,
        page=page,
        limit=limit,
    )


@router.patch(
    "/{user_id}",
    response_model=Envelope[UserRead],
    dependencies=[Depends(require_role("admin"))],
)
def update_user(user_id: str, payload: UserUpdate, db: Session = Depends(get_db)):
    return envelope(user_service.users.update(db, user_id, payload))


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_role("admin"))],
)
def delete_user(user_id: str, db: Session = Depends(get_db)):
    user_service.users.delete(db, user_id)
