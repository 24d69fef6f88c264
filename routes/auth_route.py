from fastapi import APIRouter
from pydantic import BaseModel

from controllers.auth_controller import login, logout

router = APIRouter()


class LoginPayload(BaseModel):
    email: str = ""
    password: str = ""


@router.get("/login")
async def login_page():
    """Describe the login screen."""
    return {
        "app": "CableEye",
        "description": "Secure login to report illegal cable connections.",
        "fields": ["email", "password"],
    }


@router.post("/login")
async def post_login(payload: LoginPayload):
    return await login(payload.email, payload.password)


@router.post("/logout")
async def post_logout():
    return await logout()
