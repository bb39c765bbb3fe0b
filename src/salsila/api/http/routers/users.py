"""User management endpoints."""

from fastapi import APIRouter, Depends, status

from src.salsila.api.http.deps import get_user_service
from src.salsila.core.services import UserService
from src.salsila.entities.core.user import AttachPersonRequest, UserCreate, UserRead

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=list[UserRead])
def list_users(service: UserService = Depends(get_user_service)) -> list[UserRead]:
    """List all active users in registration order."""
    return service.get_all_users()


@router.get("/{uid}", response_model=UserRead)
def get_user(uid: str, service: UserService = Depends(get_user_service)) -> UserRead:
    return service.get_user_by_uid(uid)


@router.post("", response_model=UserRead, status_code=status.HTTP_201_CREATED)
def create_user(
    payload: UserCreate, service: UserService = Depends(get_user_service)
) -> UserRead:
    """Register a user after running the registration policy."""
    candidate = payload.to_entity()
    service.validate_user(candidate)
    stored = service.create_user(candidate)
    return UserRead.model_validate(stored, from_attributes=True)


@router.put("/{uid}/person", response_model=UserRead)
def attach_person(
    uid: str,
    payload: AttachPersonRequest,
    service: UserService = Depends(get_user_service),
) -> UserRead:
    service.attach_person(payload.person_uid, uid)
    return service.get_user_by_uid(uid)


@router.delete("/{uid}")
def delete_user(
    uid: str, service: UserService = Depends(get_user_service)
) -> dict[str, str]:
    service.delete_user_by_uid(uid)
    return {"message": "User deleted"}
