"""Authentication routes: sign-up, sign-in, sign-out and session lookup."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from ..database import get_document_store, get_session
from ..schemas import AuthResponse, SessionResponse, SignInRequest, SignUpRequest
from ..services import CurrentUser, get_current_user, sign_in, sign_out, sign_up
from ..store import DocumentStore

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def signup_endpoint(
    payload: SignUpRequest,
    db: Session = Depends(get_session),
    store: DocumentStore = Depends(get_document_store),
) -> AuthResponse:
    account, token = sign_up(db, store, payload)
    return AuthResponse(access_token=token, user_id=account.uid, email=account.email)


@router.post("/signin", response_model=AuthResponse)
async def signin_endpoint(payload: SignInRequest, db: Session = Depends(get_session)) -> AuthResponse:
    account, token = sign_in(db, str(payload.email), payload.password)
    return AuthResponse(access_token=token, user_id=account.uid, email=account.email)


@router.post("/signout", status_code=status.HTTP_204_NO_CONTENT)
async def signout_endpoint(
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> Response:
    sign_out(db, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/session", response_model=SessionResponse)
async def session_endpoint(current_user: CurrentUser = Depends(get_current_user)) -> SessionResponse:
    return SessionResponse(user_id=current_user.uid, email=current_user.email, expires_at=current_user.expires_at)


__all__ = ["router"]
