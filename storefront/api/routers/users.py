from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from storefront.api.errors import to_http
from storefront.data.database import get_db
from storefront.domain.errors import StorefrontError
from storefront.domain.schemas import UserCreate, UserUpdate, UserRead
from storefront.services.user_service import UserService

router = APIRouter(prefix="/api/users", tags=["users"])


@router.post("", response_model=UserRead, status_code=201)
def create_user(payload: UserCreate, db: Session = Depends(get_db)):
    try:
        return UserService(db).create_user(payload)
    except StorefrontError as e:
        raise to_http(e)


@router.get("", response_model=list[UserRead])
def list_users(db: Session = Depends(get_db)):
    return UserService(db).list_users()


@router.get("/by-email", response_model=UserRead)
def get_user_by_email(email: str = Query(...), db: Session = Depends(get_db)):
    try:
        return UserService(db).get_user_by_email(email)
    except StorefrontError as e:
        raise to_http(e)


@router.get("/{user_id}", response_model=UserRead)
def get_user(user_id: str, db: Session = Depends(get_db)):
    try:
        return UserService(db).get_user(user_id)
    except StorefrontError as e:
        raise to_http(e)


@router.put("/{user_id}", response_model=UserRead)
def update_user(user_id: str, payload: UserUpdate, db: Session = Depends(get_db)):
    try:
        return UserService(db).update_user(user_id, payload)
    except StorefrontError as e:
        raise to_http(e)


@router.delete("/{user_id}", status_code=204)
def delete_user(user_id: str, db: Session = Depends(get_db)):
    try:
        UserService(db).delete_user(user_id)
        return Response(status_code=204)
    except StorefrontError as e:
        raise to_http(e)
