import secrets

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from echolog.config import settings

security = HTTPBasic()


def verify_credentials(credentials: HTTPBasicCredentials = Depends(security)) -> str:  # noqa: B008
    """Verify basic auth credentials and return the username, which owns the memos."""
    if not is_known_user(credentials):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password",
            headers={"WWW-Authenticate": "Basic"},
        )
    return credentials.username


def is_known_user(credentials: HTTPBasicCredentials) -> bool:
    """Verify basic auth credentials without raising exceptions."""
    expected_password = settings.users.get(credentials.username)
    if expected_password is None:
        return False
    return secrets.compare_digest(
        credentials.password.encode("utf-8"), expected_password.encode("utf-8")
    )
