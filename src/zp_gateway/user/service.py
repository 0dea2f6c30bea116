"""Auth service: sign-up, sign-in, sign-out against the hosted auth API.

Passwords never touch this process beyond being forwarded; hashing,
email confirmation and sessions belong to the backend. The profile row is
created by a backend trigger from the signup metadata (see zp_account for
the client-side fallback when that trigger has not run).
"""

import logging

from src.zp_backend.domain.models import AuthSession, AuthUser
from src.zp_backend.domain.repository import AuthBackendProtocol
from src.zp_common.errors import AppError
from src.zp_phone.normalizer import PhoneNormalizer

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(
        self,
        backend: AuthBackendProtocol,
        normalizer: PhoneNormalizer | None = None,
    ) -> None:
        self._backend = backend
        self._normalizer = normalizer or PhoneNormalizer()

    async def sign_up(
        self,
        email: str,
        password: str,
        full_name: str,
        username: str,
        phone_number: str,
    ) -> AuthUser:
        """Register with the backend; phone is stored in canonical E.164 form."""
        metadata = {
            "full_name": full_name.strip(),
            "username": username.lower(),
            "phone_number": self._normalizer.normalize(phone_number),
        }
        user = await self._backend.sign_up(email.strip().lower(), password, metadata)
        logger.info("Signed up user %s (@%s)", user.id, metadata["username"])
        return user

    async def sign_in(self, email: str, password: str) -> AuthSession:
        return await self._backend.sign_in_with_password(email.strip().lower(), password)

    async def sign_out(self, access_token: str) -> None:
        """Best effort: the token expires on its own if the backend call fails."""
        try:
            await self._backend.sign_out(access_token)
        except AppError as exc:
            logger.warning("Sign-out failed, token left to expire: %s", exc.message)
