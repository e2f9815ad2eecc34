from sqlalchemy.orm import Session
from storefront.data.models.user import UserModel
from storefront.domain.errors import NotFoundError, ValidationError
from storefront.repos.user_repo import UserRepo
from storefront.domain.schemas import UserCreate, UserUpdate, UserRead


class UserService:
    def __init__(self, db: Session):
        self.repo = UserRepo(db)

    def create_user(self, payload: UserCreate) -> UserRead:
        if self.repo.get_user(payload.id):
            raise ValidationError(f"User already exists with id: {payload.id}")
        if self.repo.get_user_by_email(payload.email):
            raise ValidationError(f"User already exists with email: {payload.email}")

        user = UserModel(
            id=payload.id,
            first_name=payload.first_name,
            last_name=payload.last_name,
            email=payload.email,
        )
        return UserRead.model_validate(self.repo.save_user(user))

    def get_user(self, user_id: str) -> UserRead:
        return UserRead.model_validate(self._require(user_id))

    def get_user_by_email(self, email: str) -> UserRead:
        user = self.repo.get_user_by_email(email)
        if not user:
            raise NotFoundError(f"User not found with email: {email}")
        return UserRead.model_validate(user)

    def list_users(self) -> list[UserRead]:
        return [UserRead.model_validate(u) for u in self.repo.list_users()]

    def update_user(self, user_id: str, payload: UserUpdate) -> UserRead:
        user = self._require(user_id)
        other = self.repo.get_user_by_email(payload.email)
        if other and other.id != user_id:
            raise ValidationError(f"User already exists with email: {payload.email}")

        user.first_name = payload.first_name
        user.last_name = payload.last_name
        user.email = payload.email
        return UserRead.model_validate(self.repo.save_user(user))

    def delete_user(self, user_id: str) -> None:
        self.repo.delete_user(self._require(user_id))

    def _require(self, user_id: str) -> UserModel:
        user = self.repo.get_user(user_id)
        if not user:
            raise NotFoundError(f"User not found with id: {user_id}")
        return user
