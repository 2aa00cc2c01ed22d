from fastapi import APIRouter, Depends
from typing import Any, Dict
from schemas.user import UserCreate, UserLogin, Token, PasswordResetRequest, PasswordResetConfirm
from config.security import create_access_token, get_token_claims, revoke_token
from crud import user_crud

router = APIRouter(
    prefix="/auth",
    tags=["auth"]
)


@router.post("/register", response_model=Token, status_code=201)
async def register(user: UserCreate):
    created = await user_crud.create_user(user)
    return Token(access_token=create_access_token(created.user_id, created.role.value), user=created)


@router.post("/login", response_model=Token)
async def login(login_data: UserLogin):
    user = await user_crud.authenticate_user(login_data.email, login_data.password)
    return Token(access_token=create_access_token(user.user_id, user.role.value), user=user)


@router.post("/logout")
async def logout(claims: Dict[str, Any] = Depends(get_token_claims)):
    await revoke_token(claims)
    return {"message": "Te-ai deconectat cu succes"}


@router.post("/password-reset")
async def request_password_reset(data: PasswordResetRequest):
    await user_crud.request_password_reset(data.email)
    return {"message": "Dacă există un cont cu această adresă, vei primi un email cu instrucțiuni de resetare."}


@router.post("/password-reset/confirm")
async def confirm_password_reset(data: PasswordResetConfirm):
    await user_crud.confirm_password_reset(data.token, data.new_password)
    return {"message": "Parola a fost schimbată cu succes"}
