"""Auth domain models: decoded access-token claims shared by every service."""

from pydantic import BaseModel


class AuthUser(BaseModel):
    """Decoded JWT claims of the calling account."""

    user_id: str
    email: str = ""
    study_id: str = "api"
    roles: list[str] = []  # developer, researcher, admin
    exp: int = 0
