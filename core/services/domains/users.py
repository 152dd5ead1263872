"""Account domain service: signup and login."""
import asyncio

from core.auth.passwords import PasswordHasher
from core.auth.tokens import TokenService
from core.errors import DuplicateEmail, WrongEmail, WrongPassword
from core.logging import get_logger, mask_email_for_logging, sanitize_id_for_logging
from core.services.models import UserIdentity
from core.services.repositories import UserStore

logger = get_logger(__name__)


class AccountService:
    """Registers shoppers and exchanges credentials for session tokens.

    bcrypt is CPU-bound, so hashing and verification run in a worker thread
    to keep the event loop free.
    """

    def __init__(self, store: UserStore, hasher: PasswordHasher, tokens: TokenService) -> None:
        self.store = store
        self.hasher = hasher
        self.tokens = tokens

    async def signup(self, display_name: str | None, email: str, password: str) -> str:
        # Cheap rejection before paying for a hash; create() re-checks
        if await self.store.find_by_email(email) is not None:
            logger.info("Signup rejected, email taken: %s", mask_email_for_logging(email))
            raise DuplicateEmail()

        password_hash = await asyncio.to_thread(self.hasher.hash, password)
        user = await self.store.create(
            UserIdentity(display_name=display_name, email=email, password_hash=password_hash)
        )
        logger.info("Signed up user %s", sanitize_id_for_logging(user.id))
        return self.tokens.issue(user.id)

    async def login(self, email: str, password: str) -> str:
        user = await self.store.find_by_email(email)
        if user is None:
            raise WrongEmail()

        matches = await asyncio.to_thread(self.hasher.verify, password, user.password_hash)
        if not matches:
            logger.info("Wrong password for user %s", sanitize_id_for_logging(user.id))
            raise WrongPassword()

        return self.tokens.issue(user.id)
