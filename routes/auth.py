from fastapi import APIRouter

import config
from auth import create_access_token
from repositories import users
from schemas.auth import SignupRequest, LoginRequest
from utils.route_helpers import ok

router = APIRouter(prefix="/api/auth", tags=["authentication"])


@router.post("/cadastro")
def register(user: SignupRequest):
    created = users.create(
        user.name,
        user.email,
        user.password,
        bio=user.bio,
        phone=user.phone,
        birth_date=user.birth_date,
        location=user.location,
    )
    return ok("User registered successfully!", created)


@router.post("/login")
def login(login_data: LoginRequest):
    user = users.authenticate(login_data.email, login_data.password)
    access_token = create_access_token({"sub": str(user["id"]), "email": user["email"]})
    return ok("Logged in successfully!", {
        "user": user,
        "redirect_to": config.LOGIN_REDIRECT,
        "access_token": access_token,
        "token_type": "bearer",
    })
