import secrets

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from app.backend.core.config import Settings, get_settings

basic_scheme = HTTPBasic(auto_error=False)


def verify_basic_auth(
    credentials: HTTPBasicCredentials | None = Depends(basic_scheme),
    settings: Settings = Depends(get_settings),
) -> str:
    """Strict basic-auth dependency; raises 401 when credentials are missing or wrong."""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="missing credentials",
            headers={"WWW-Authenticate": "Basic"},
        )

    # compare both fields even when the first one fails
    user_ok = secrets.compare_digest(
        credentials.username.encode("utf-8"), settings.basic_auth_username.encode("utf-8")
    )
    pass_ok = secrets.compare_digest(
        credentials.password.encode("utf-8"), settings.basic_auth_password.encode("utf-8")
    )
    if not (settings.basic_auth_username and user_ok and pass_ok):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="invalid credentials",
            headers={"WWW-Authenticate": "Basic"},
        )
    return credentials.username
