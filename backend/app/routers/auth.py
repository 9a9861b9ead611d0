"""Auth router: register, login, logout, current user"""
from fastapi import APIRouter, Depends, HTTPException, Response, Request
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.redis import get_redis
from app.core.session import create_session, destroy_session
from app.core.config import settings
from app.core.rate_limit import limiter, LOGIN_RATE_LIMIT, REGISTER_RATE_LIMIT
from app.schemas.auth import RegisterRequest, LoginRequest, AuthResponse, UserInfo
from app.services import auth_service
from app.routers.deps import require_login

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", response_model=AuthResponse, status_code=201)
@limiter.limit(REGISTER_RATE_LIMIT)
async def register(request: Request, req: RegisterRequest, db: Session = Depends(get_db)):
    """Create a buyer or seller account"""
    if auth_service.get_user_by_email(db, req.email):
        raise HTTPException(status_code=400, detail="An account with this email already exists")

    user = auth_service.create_user(
        db=db,
        name=req.name,
        email=req.email,
        password=req.password,
        role=req.role,
        phone=req.phone,
    )
    return AuthResponse(message="Registration successful", user_id=user.id)


@router.post("/login", response_model=AuthResponse)
@limiter.limit(LOGIN_RATE_LIMIT)
async def login(
    request: Request,
    req: LoginRequest,
    response: Response,
    db: Session = Depends(get_db),
    r=Depends(get_redis),
):
    """Log in and set the session cookie"""
    user = auth_service.authenticate(db, req.email, req.password)
    if user is None:
        raise HTTPException(status_code=401, detail="Invalid email or password")

    store = auth_service.get_store_for_user(db, user.id)
    session_id = await create_session(r, user.id, user.role, user.email, store.id if store else None)

    response.set_cookie(
        key="session_id",
        value=session_id,
        httponly=True,
        secure=not settings.DEBUG,
        samesite="lax",
        max_age=settings.SESSION_TIMEOUT_MINUTES * 60,
    )
    return AuthResponse(message="Login successful", user_id=user.id)


@router.post("/logout")
async def logout(request: Request, response: Response, r=Depends(get_redis)):
    session_id = request.cookies.get("session_id")
    if session_id:
        await destroy_session(r, session_id)
    response.delete_cookie("session_id")
    return {"message": "Logged out"}


@router.get("/me", response_model=UserInfo)
async def get_me(user=Depends(require_login), db: Session = Depends(get_db)):
    """Current user, with the store id for sellers"""
    info = UserInfo.model_validate(user)
    store = auth_service.get_store_for_user(db, user.id)
    info.store_id = store.id if store else None
    return info
