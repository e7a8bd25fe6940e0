import logging
from typing import Optional
from classbook.api.client import BackendClient
from classbook.errors import AuthorizationError
from classbook.schemas.user import Credentials, Role, SessionUser, SignupRequest

logger = logging.getLogger(__name__)


class UserSession:
    """
    Identity of the logged-in user for the duration of one login.

    Populated by `login`, cleared by `logout`. Components that need the
    current user receive the session explicitly.
    """

    def __init__(self, client: BackendClient):
        self.client = client
        self.user: Optional[SessionUser] = None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    @property
    def is_admin(self) -> bool:
        return self.user is not None and self.user.role == Role.ADMIN

    @property
    def token(self) -> Optional[str]:
        return self.client.token

    def require_user(self) -> SessionUser:
        if self.user is None:
            raise AuthorizationError()
        return self.user

    async def login(self, email: str, password: str) -> SessionUser:
        result = await self.client.login(Credentials(email=email, password=password))
        self.user = result.user
        logger.debug(f"Logged in user: {self.user.id}, role: {self.user.role.value}")
        return self.user

    async def signup(self, name: str, email: str, password: str, role: Role = Role.STUDENT) -> SessionUser:
        await self.client.signup(
            SignupRequest(name=name, email=email, password=password, role=role)
        )
        return await self.login(email, password)

    def logout(self):
        if self.user is not None:
            logger.debug(f"Logged out user: {self.user.id}")
        self.user = None
        self.client.token = None
