"""Account API routes."""

from fastapi import APIRouter

from ...app import Application
from ...errors import ServiceError
from ..handlers import internal_error
from ..schemas import AuthData, AuthResponse, SigninRequest, SignupRequest, UserOut


def create_auth_router(app: Application) -> APIRouter:
    """Create auth router."""
    router = APIRouter(prefix="/api/auth", tags=["auth"])

    @router.post("/signup", response_model=AuthResponse, status_code=201)
    async def signup(request: SignupRequest) -> AuthResponse:
        """Create an account."""
        try:
            user = await app.auth.signup(
                name=request.name or "",
                email=request.email or "",
                password=request.password or "",
            )
        except ServiceError:
            raise
        except Exception as e:
            raise internal_error("signing up", e) from e

        return AuthResponse(
            message="User created successfully",
            data=AuthData(user=UserOut.from_model(user)),
        )

    @router.post("/signin", response_model=AuthResponse)
    async def signin(request: SigninRequest) -> AuthResponse:
        """Sign in with email and password."""
        try:
            user = await app.auth.signin(
                email=request.email or "", password=request.password or ""
            )
        except ServiceError:
            raise
        except Exception as e:
            raise internal_error("signing in", e) from e

        return AuthResponse(
            message="Signed in successfully",
            data=AuthData(user=UserOut.from_model(user)),
        )

    @router.get("/users/{user_id}", response_model=UserOut)
    async def get_user(user_id: str) -> UserOut:
        """Public profile of an account."""
        try:
            return UserOut.from_model(await app.auth.get_user(user_id))
        except ServiceError:
            raise
        except Exception as e:
            raise internal_error("fetching user", e) from e

    return router
