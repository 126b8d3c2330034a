from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlmodel import Session, select

from storefront.database import get_session
from storefront.errors import AuthenticationError, envelope
from storefront.models.user import User
from storefront.schemas.user_schemas import UserLogin, Token
from storefront.utils.hash import verify_password
from storefront.utils.token import create_access_token, get_current_user

router = APIRouter()


@router.post("/login", response_model=Token)
def login(payload: UserLogin, session: Session = Depends(get_session)):
    user = session.exec(select(User).where(func.lower(User.email) == payload.email.lower())).first()

    if not user or not verify_password(payload.password, user.password):
        raise AuthenticationError("Invalid email or password")

    token = create_access_token({"user_id": user.id})
    return Token(access_token=token, token_type="bearer")


@router.get("/me")
def me(current_user: User = Depends(get_current_user)):
    return envelope(True, data=current_user.public_dict())
