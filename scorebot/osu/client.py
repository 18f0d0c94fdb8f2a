"""osu! API v2 client with token refresh, retry logic, and rate limit handling."""

import asyncio
import time
from typing import Any

import aiohttp

from scorebot.core.logging import get_logger
from scorebot.shared.exceptions import OsuAPIError
from scorebot.shared.models import GameMode, Player, RawResult

logger = get_logger(__name__)


class OsuClient:
    """Async osu! API v2 client using the client credentials grant.

    Attributes:
        BASE_URL: API base URL
        TOKEN_URL: OAuth token endpoint
        API_VERSION: Value of the x-api-version header; selects the lazer score format
        MAX_RETRIES: Maximum number of retry attempts
        RETRY_DELAYS: Exponential backoff delays in seconds
        TOKEN_REFRESH_MARGIN: Seconds before expiry at which the token is renewed
    """

    BASE_URL = "https://osu.ppy.sh/api/v2"
    TOKEN_URL = "https://osu.ppy.sh/oauth/token"
    API_VERSION = "20240529"
    MAX_RETRIES = 3
    RETRY_DELAYS = [2, 4, 8]
    TOKEN_REFRESH_MARGIN = 60

    def __init__(self, client_id: int, client_secret: str) -> None:
        """Initialize osu! client with OAuth application credentials.

        Args:
            client_id: OAuth application id
            client_secret: OAuth application secret
        """
        self.client_id = client_id
        self.client_secret = client_secret
        self.session: aiohttp.ClientSession | None = None
        self.access_token: str | None = None
        self.token_expires_at = 0.0

    async def __aenter__(self) -> "OsuClient":
        """Context manager entry: create aiohttp session.

        Returns:
            Self for use in async with statement
        """
        self.session = aiohttp.ClientSession(
            headers={
                "Accept": "application/json",
                "x-api-version": self.API_VERSION,
                "User-Agent": "score-bot",
            }
        )
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        """Context manager exit: close aiohttp session."""
        if self.session:
            await self.session.close()

    async def authenticate(self) -> None:
        """Obtain an access token via the client credentials grant.

        Raises:
            OsuAPIError: If credentials are rejected or network error occurs
        """
        form = {
            "client_id": str(self.client_id),
            "client_secret": self.client_secret,
            "grant_type": "client_credentials",
            "scope": "public",
        }

        for attempt in range(self.MAX_RETRIES):
            try:
                if not self.session:
                    raise OsuAPIError("Session not initialized")

                async with self.session.post(self.TOKEN_URL, data=form) as response:
                    if response.status == 200:
                        data = await response.json()
                        self.access_token = data["access_token"]
                        self.token_expires_at = time.monotonic() + float(data.get("expires_in", 86400))
                        logger.info("osu.auth.token_acquired", expires_in=data.get("expires_in"))
                        return
                    elif response.status in (400, 401, 403):
                        raise OsuAPIError(f"Invalid credentials: {response.status}")
                    else:
                        raise OsuAPIError(f"Token request failed: {response.status}")
            except aiohttp.ClientError as e:
                if attempt < self.MAX_RETRIES - 1:
                    logger.warning("osu.auth.retry", attempt=attempt + 1, error=str(e))
                    await asyncio.sleep(self.RETRY_DELAYS[attempt])
                else:
                    raise OsuAPIError(f"Network error: {e}") from e

        raise OsuAPIError("Failed to authenticate after retries")

    async def _ensure_token(self) -> str:
        """Return a valid access token, renewing it when close to expiry."""
        if self.access_token is None or time.monotonic() >= self.token_expires_at - self.TOKEN_REFRESH_MARGIN:
            await self.authenticate()
        assert self.access_token is not None
        return self.access_token

    async def _get(self, path: str, params: dict[str, Any] | None = None, *, not_found: Any = None) -> Any:
        """GET an API path with retry on network errors.

        Args:
            path: Path relative to BASE_URL
            params: Query parameters
            not_found: Value returned on 404

        Returns:
            Decoded JSON body, or ``not_found`` on 404

        Raises:
            OsuAPIError: If the request fails or is rate limited
        """
        url = f"{self.BASE_URL}{path}"

        for attempt in range(self.MAX_RETRIES):
            try:
                if not self.session:
                    raise OsuAPIError("Session not initialized")

                token = await self._ensure_token()
                headers = {"Authorization": f"Bearer {token}"}

                async with self.session.get(url, params=params, headers=headers) as response:
                    if response.status == 200:
                        return await response.json()
                    elif response.status == 404:
                        logger.info("osu.api.not_found", path=path)
                        return not_found
                    elif response.status == 401:
                        # Token revoked or expired early; next call re-authenticates
                        self.access_token = None
                        raise OsuAPIError(f"Unauthorized: {response.status}")
                    elif response.status == 429:
                        logger.warning(
                            "osu.ratelimit",
                            path=path,
                            retry_after=response.headers.get("Retry-After"),
                            status=response.status,
                        )
                        raise OsuAPIError(f"Rate limited: {response.status}")
                    else:
                        raise OsuAPIError(f"API error: {response.status}")
            except aiohttp.ClientError as e:
                if attempt < self.MAX_RETRIES - 1:
                    logger.warning("osu.api.retry", path=path, attempt=attempt + 1, error=str(e))
                    await asyncio.sleep(self.RETRY_DELAYS[attempt])
                else:
                    raise OsuAPIError(f"Network error: {e}") from e

        return not_found

    async def get_user(self, user: int | str) -> Player | None:
        """Look up a player by id or username.

        Args:
            user: Numeric user id or username

        Returns:
            Player, or None if no such user exists

        Raises:
            OsuAPIError: If the request fails
        """
        key = "id" if isinstance(user, int) else "username"
        data = await self._get(f"/users/{user}", params={"key": key})
        if not data:
            return None
        return Player.from_api(data)

    async def fetch_recent_scores(self, user_id: int, mode: GameMode, limit: int = 100) -> list[RawResult]:
        """Fetch a player's recent scores in one mode, most recent first.

        Scores that fail to parse are logged and left out; the rest are
        still returned.

        Args:
            user_id: osu! user id
            mode: Ruleset to fetch
            limit: Maximum number of scores (API caps at 100)

        Returns:
            Parsed scores; empty if the player has none or does not exist

        Raises:
            OsuAPIError: If the request fails or the response is not a list
        """
        data: list[dict[str, Any]] = await self._get(
            f"/users/{user_id}/scores/recent",
            params={"mode": mode.value, "limit": limit},
            not_found=[],
        )

        if not isinstance(data, list):
            raise OsuAPIError(f"Malformed score payload for user {user_id} in {mode.value}: expected a list")

        scores: list[RawResult] = []
        for item in data:
            try:
                scores.append(RawResult.from_api(item))
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                logger.warning(
                    "osu.api.score_malformed",
                    user_id=user_id,
                    mode=mode.value,
                    score_id=item.get("id") if isinstance(item, dict) else None,
                    error=str(e),
                )
        return scores
