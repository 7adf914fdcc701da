"""ROUTES: AUTH"""

from fastapi import APIRouter, Depends

from leadwatch.api.dependencies import AdminUser, get_current_admin

router = APIRouter(tags=["Auth"])


@router.get("/me")
async def me(admin: AdminUser = Depends(get_current_admin)):
    return {"user": {"email": admin.email, "name": admin.name}}
