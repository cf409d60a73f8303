from fastapi import APIRouter, Depends, Request, status

from src.api.error import to_http_error
from src.api.middleware import get_client_ip
from src.app.services.rate_limiter import AuthRateLimiter
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.auth import (
    GetCurrentUserUseCase,
    LoginCommand,
    LoginResponse,
    LoginUseCase,
    RegisterCommand,
    RegisterUseCase,
    UserInfo,
)
from src.domain.authorization import Actor
from src.depends import (
    get_config,
    get_current_actor,
    get_rate_limiter,
    get_unit_of_work,
)

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register", status_code=status.HTTP_201_CREATED, response_model=UserInfo)
async def register(command: RegisterCommand, uow: UnitOfWork = Depends(get_unit_of_work)):
    """
    Create an account with role "user"

    Raises:
        - 400 Bad Request: VALIDATION_FAILED
        - 409 Conflict: USERNAME_TAKEN or EMAIL_ALREADY_EXISTS
    """
    result = await RegisterUseCase(uow).execute(command)
    if result.is_err():
        raise to_http_error(result.error)
    return result.value


@router.post("/login", status_code=status.HTTP_200_OK, response_model=LoginResponse)
async def login(
    command: LoginCommand,
    request: Request,
    uow: UnitOfWork = Depends(get_unit_of_work),
    rate_limiter: AuthRateLimiter = Depends(get_rate_limiter),
    config=Depends(get_config),
):
    """
    Authenticate with username (or email) and password

    Raises:
        - 401 Unauthorized: INVALID_CREDENTIALS
        - 403 Forbidden: USER_DISABLED
        - 429 Too Many Requests: RATE_LIMITED (details.retry_after in seconds)
    """
    use_case = LoginUseCase(
        uow, rate_limiter, config.JWT_SECRET, config.JWT_EXPIRE_MINUTES
    )
    result = await use_case.execute(command, get_client_ip(request))
    if result.is_err():
        raise to_http_error(result.error)
    return result.value


@router.get("/me", status_code=status.HTTP_200_OK, response_model=UserInfo)
async def me(
    actor: Actor = Depends(get_current_actor),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    result = await GetCurrentUserUseCase(uow).execute(actor)
    if result.is_err():
        raise to_http_error(result.error)
    return result.value
