"""RecipientResolver: turns a raw search string into a transfer target.

Resolution order:
  1. trim; fewer than 2 characters is rejected
  2. strip leading '@'
  3. external ledger prefix ('zm-') -> external ledger table only, nothing else
  4. classify as email / phone / username
  5. exactly one lookup against profiles for that classification
  6. reject the signed-in user's own profile

Every lookup races a fixed timeout; a timeout is reported separately from a
backend failure and from "not found".
"""

import asyncio
import logging
from collections.abc import Awaitable
from typing import TypeVar

from config.settings import settings
from src.zp_backend.domain.models import Profile
from src.zp_backend.domain.repository import BackendProtocol
from src.zp_common.enums import SearchMethod
from src.zp_common.errors import (
    AmbiguousRecipientError,
    LookupTimeoutError,
    RecipientNotFoundError,
    SearchTooShortError,
    SelfTransferError,
)
from src.zp_phone.normalizer import PhoneNormalizer
from src.zp_transfer.domain.classifier import classify_query, clean_username
from src.zp_transfer.domain.models import RecipientCandidate

logger = logging.getLogger(__name__)

MIN_QUERY_LENGTH = 2

T = TypeVar("T")


class RecipientResolver:
    def __init__(
        self,
        backend: BackendProtocol,
        *,
        normalizer: PhoneNormalizer | None = None,
        external_prefix: str | None = None,
        timeout: float | None = None,
        suggestion_limit: int | None = None,
    ) -> None:
        self._backend = backend
        self._normalizer = normalizer or PhoneNormalizer()
        self._prefix = (external_prefix or settings.EXTERNAL_LEDGER_PREFIX).lower()
        self._timeout = settings.LOOKUP_TIMEOUT_SECONDS if timeout is None else timeout
        self._suggestion_limit = suggestion_limit or settings.USERNAME_SUGGESTION_LIMIT

    async def resolve(self, raw_input: str, current_user_id: str) -> RecipientCandidate:
        """Resolve `raw_input` to a candidate or raise the matching search error."""
        query = raw_input.strip()
        if len(query) < MIN_QUERY_LENGTH:
            raise SearchTooShortError(MIN_QUERY_LENGTH)
        query = query.lstrip("@")

        if query.lower().startswith(self._prefix):
            return await self._with_timeout(self._resolve_external(query.lower()))

        method = classify_query(query)
        if method is SearchMethod.USERNAME:
            query = clean_username(query)
        logger.debug("Resolving recipient by %s", method.value)

        profile = await self._with_timeout(self._lookup(method, query, current_user_id))
        if profile.id == current_user_id:
            raise SelfTransferError()
        return RecipientCandidate.from_profile(profile)

    async def _with_timeout(self, lookup: Awaitable[T]) -> T:
        try:
            return await asyncio.wait_for(lookup, timeout=self._timeout)
        except TimeoutError:
            logger.warning("Recipient lookup timed out after %.1fs", self._timeout)
            raise LookupTimeoutError(self._timeout) from None

    async def _resolve_external(self, username: str) -> RecipientCandidate:
        account = await self._backend.find_external_account(username)
        if account is None:
            raise RecipientNotFoundError(SearchMethod.EXTERNAL.value, username)
        return RecipientCandidate.from_external(account)

    async def _lookup(self, method: SearchMethod, query: str, current_user_id: str) -> Profile:
        profile: Profile | None
        if method is SearchMethod.EMAIL:
            profile = await self._backend.find_profile_by_email(query.lower())
        elif method is SearchMethod.PHONE:
            formats = self._normalizer.all_lookup_formats(query)
            profile = await self._backend.find_profile_by_phone(formats)
        else:
            profile = await self._backend.find_profile_by_username(query)
            if profile is None:
                await self._suggest(query, current_user_id)

        if profile is None:
            raise RecipientNotFoundError(method.value, query)
        return profile

    async def _suggest(self, username: str, current_user_id: str) -> None:
        """Raise AmbiguousRecipientError listing near-miss usernames, if any.

        Suggestions are never treated as a resolution.
        """
        similar = await self._backend.search_profiles_by_username(
            username, self._suggestion_limit
        )
        names = [p.username for p in similar if p.id != current_user_id]
        if names:
            raise AmbiguousRecipientError(username, names)
