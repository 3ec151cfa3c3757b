from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from docbrief.models.documents import AuthResponse, LoginRequest, RegisterRequest, UserOut
from docbrief.services.auth import USER_STORE, create_access_token, decode_token

router = APIRouter(prefix="/api", tags=["auth"])

_bearer = HTTPBearer(auto_error=False)


def get_current_user_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
) -> str:
    """Resolve the caller's user id from the bearer token."""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Access token required",
        )
    payload = decode_token(credentials.credentials)
    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid token",
        )
    return payload["sub"]


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(body: RegisterRequest) -> AuthResponse:
    try:
        user = USER_STORE.register(email=body.email, password=body.password, name=body.name)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc

    return AuthResponse(
        message="User created successfully",
        token=create_access_token(user),
        user=UserOut(id=user.id, email=user.email, name=user.name),
    )


@router.post("/login", response_model=AuthResponse)
def login(body: LoginRequest) -> AuthResponse:
    user = USER_STORE.authenticate(body.email, body.password)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid credentials",
        )
    return AuthResponse(
        message="Login successful",
        token=create_access_token(user),
        user=UserOut(id=user.id, email=user.email, name=user.name),
    )
