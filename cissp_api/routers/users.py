from fastapi import APIRouter

from cissp_api.dependencies import CurrentUser
from cissp_api.schemas.user_schemas import UserRead

router = APIRouter(prefix="/api/user", tags=["users"])


@router.get("/is-admin")
def is_admin(user: CurrentUser):
    return {"isAdmin": user.is_admin}


@router.get("/me")
def me(user: CurrentUser):
    return {"user": UserRead.model_validate(user)}
