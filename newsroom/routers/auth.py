from typing import Optional
from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.security import OAuth2PasswordBearer, OAuth2PasswordRequestForm
from loguru import logger
from pydantic import BaseModel
from sqlmodel import Session

from newsroom.core.config import settings
from newsroom.core.errors import AuthenticationError, AuthorizationError
from newsroom.core.security import decode_access_token
from newsroom.db.session import get_session
from newsroom.models.user import Token, User, UserCreate, UserPublic
from newsroom.services.auth import AuthService
from newsroom.services.storage import DatabaseStorage

router = APIRouter()

oauth2_scheme_optional = OAuth2PasswordBearer(tokenUrl="api/token", auto_error=False)


class LoginRequest(BaseModel):
    username: str
    password: str


def get_storage(session: Session = Depends(get_session)) -> DatabaseStorage:
    return DatabaseStorage(session)

def get_auth_service(storage: DatabaseStorage = Depends(get_storage)) -> AuthService:
    return AuthService(storage)


def get_access_token(request: Request, token: Optional[str] = Depends(oauth2_scheme_optional)) -> Optional[str]:
    # Bearer header wins over the login cookie
    if token:
        return token
    return request.cookies.get(settings.ACCESS_TOKEN_COOKIE_NAME)

def get_current_user_optional(
    token: Optional[str] = Depends(get_access_token),
    storage: DatabaseStorage = Depends(get_storage),
) -> Optional[User]:
    if not token:
        return None
    username = decode_access_token(token)
    if username is None:
        return None
    return storage.get_user_by_username(username)

def get_current_user(user: Optional[User] = Depends(get_current_user_optional)) -> User:
    if user is None:
        raise AuthenticationError("Authentication required")
    return user

def require_admin(user: User = Depends(get_current_user)) -> User:
    """Guard for every mutating category/article route."""
    if not user.is_admin:
        logger.warning(f"User {user.id} ({user.username}) denied admin access")
        raise AuthorizationError("Admin access required")
    return user

def is_admin(user: Optional[User]) -> bool:
    return user is not None and user.is_admin


def _set_login_cookie(response: Response, token: str):
    response.set_cookie(
        key=settings.ACCESS_TOKEN_COOKIE_NAME,
        value=token,
        httponly=True,
        samesite="lax",
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )

def _login(service: AuthService, response: Response, username: str, password: str) -> Token:
    user = service.authenticate_user(username, password)
    if not user:
        raise AuthenticationError("Incorrect username or password")
    token = service.issue_token(user)
    _set_login_cookie(response, token)
    logger.info(f"User {user.id} ({user.username}) logged in")
    return Token(access_token=token)


@router.post("/register", response_model=UserPublic, status_code=status.HTTP_201_CREATED)
def register(user_in: UserCreate, response: Response, service: AuthService = Depends(get_auth_service)):
    user = service.register_user(user_in.username, user_in.password)
    _set_login_cookie(response, service.issue_token(user))
    return user

@router.post("/login", response_model=Token)
def login(credentials: LoginRequest, response: Response, service: AuthService = Depends(get_auth_service)):
    return _login(service, response, credentials.username, credentials.password)

# OAuth2 clients (Swagger UI) expect snake_case keys here
@router.post("/token", response_model=Token, response_model_by_alias=False)
def login_for_access_token(
    response: Response,
    form_data: OAuth2PasswordRequestForm = Depends(),
    service: AuthService = Depends(get_auth_service),
):
    return _login(service, response, form_data.username, form_data.password)

@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout():
    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    response.delete_cookie(settings.ACCESS_TOKEN_COOKIE_NAME)
    return response

@router.get("/user", response_model=UserPublic)
def read_current_user(current_user: User = Depends(get_current_user)):
    return current_user
