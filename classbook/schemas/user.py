from enum import Enum
from pydantic import BaseModel
from classbook.schemas.base import WireModel


class Role(str, Enum):
    STUDENT = "student"
    ADMIN = "admin"


class SessionUser(WireModel):
    id: int
    name: str
    email: str
    role: Role = Role.STUDENT


class Credentials(BaseModel):
    email: str
    password: str


class SignupRequest(Credentials):
    name: str
    role: Role = Role.STUDENT


class LoginResult(WireModel):
    user: SessionUser
    access_token: str
