"""AccountApplicationService: signed-in profile, balance and history.

Profile loading retries with exponential backoff (PROFILE_FETCH_RETRIES
attempts); only the last failure is raised.
A missing profile row (signup trigger not run yet) is created from the auth
metadata with the starting balance.
"""

import asyncio
import logging

from config.settings import settings
from src.zp_account.application.schemas import (
    BalanceResponse,
    TransactionItem,
    TransactionListResponse,
)
from src.zp_backend.domain.models import AuthUser, Profile
from src.zp_backend.domain.repository import BackendProtocol
from src.zp_common.errors import BackendError
from src.zp_common.money import amount_to_display
from src.zp_phone.normalizer import PhoneNormalizer

logger = logging.getLogger(__name__)


class AccountApplicationService:
    def __init__(
        self,
        backend: BackendProtocol,
        *,
        max_attempts: int | None = None,
        base_delay: float | None = None,
        normalizer: PhoneNormalizer | None = None,
    ) -> None:
        self._backend = backend
        self._max_attempts = max_attempts or settings.PROFILE_FETCH_RETRIES
        self._base_delay = (
            settings.PROFILE_RETRY_BASE_DELAY_SECONDS if base_delay is None else base_delay
        )
        self._normalizer = normalizer or PhoneNormalizer()

    async def load_profile(self, user: AuthUser) -> Profile:
        for attempt in range(self._max_attempts):
            try:
                profile = await self._backend.get_profile(user.id)
                if profile is None:
                    logger.info("No profile row for %s, creating one", user.id)
                    profile = await self._backend.insert_profile(self._initial_profile(user))
                return profile
            except BackendError as exc:
                if attempt == self._max_attempts - 1:
                    raise
                delay = self._base_delay * (2 ** attempt)
                logger.warning(
                    "Profile fetch attempt %d/%d failed (%s), retrying in %.1fs",
                    attempt + 1, self._max_attempts, exc.message, delay,
                )
                await asyncio.sleep(delay)
        raise BackendError("Profile fetch failed")  # max_attempts < 1

    async def get_balance(self, user: AuthUser) -> BalanceResponse:
        profile = await self.load_profile(user)
        return BalanceResponse(
            user_id=profile.id,
            balance=profile.balance,
            balance_display=amount_to_display(profile.balance),
        )

    async def list_transactions(self, user: AuthUser, limit: int = 20) -> TransactionListResponse:
        transactions = await self._backend.list_transactions(user.id, limit)
        return TransactionListResponse(
            items=[TransactionItem.from_transaction(tx, user.id) for tx in transactions]
        )

    def _initial_profile(self, user: AuthUser) -> Profile:
        meta = user.metadata
        phone = meta.get("phone_number", "")
        return Profile(
            id=user.id,
            email=user.email,
            full_name=meta.get("full_name") or "New User",
            username=meta.get("username") or f"user_{user.id[:8]}",
            phone_number=self._normalizer.normalize(phone) if phone else "",
            balance=settings.STARTING_BALANCE,
        )
