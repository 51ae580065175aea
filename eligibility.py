# eligibility.py
import asyncio
from concurrent.futures import Executor
from typing import Any, Awaitable, Callable, Dict, Optional

import requests
from requests import Session

import config
from logger import get_logger
from models import EligibilityResult
from utils import shorten_address

logger = get_logger("Eligibility", config.LOG_LEVEL)

SUCCESS_CODE = 0


class EligibilityError(Exception):
    """The API answered, but with a non-success code."""

    def __init__(self, code: Any) -> None:
        super().__init__(f"Eligibility API returned code {code}")
        self.code = code


class MalformedResponseError(ValueError):
    """The API answered with code 0 but a body that cannot be used; not retried."""


class ExhaustedRetriesError(Exception):
    """All eligibility attempts failed; last_error holds the final failure."""

    def __init__(self, address: str, attempts: int, last_error: Exception) -> None:
        super().__init__(f"Eligibility check for {address} failed after {attempts} attempts: {last_error}")
        self.address = address
        self.attempts = attempts
        self.last_error = last_error


class EligibilityClient:
    """Eligibility endpoint client; one per wallet so each can use its own proxy."""

    def __init__(
        self,
        proxy: Optional[str] = None,
        timeout: Optional[float] = None,
        base_url: str = config.API_BASE_URL,
        version: str = config.API_VERSION,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = Session()
        if proxy:
            self.session.proxies = {'http': proxy, 'https': proxy}
        self.session.headers.update({
            'authority': config.API_AUTHORITY,
            'origin': config.API_ORIGIN,
            'referer': config.API_REFERER,
            'version': version,
        })

    def close(self) -> None:
        self.session.close()

    def check_eligibility(self, address: str, signature: str) -> EligibilityResult:
        response = self.session.get(
            f"{self.base_url}/grant/check-eligibility",
            params={'wallet': address, 'signature': signature},
            timeout=self.timeout,
        )
        response.raise_for_status()
        return parse_eligibility(response.json())


def parse_eligibility(body: Dict[str, Any]) -> EligibilityResult:
    code = body.get("code")
    if code != SUCCESS_CODE:
        raise EligibilityError(code)

    data = body.get("data")
    if data is None:
        return EligibilityResult(status_code=code, has_data=False)
    if not isinstance(data, dict):
        raise MalformedResponseError(f"Unexpected data field: {data!r}")

    amount = data.get("amount")
    if amount not in (None, ""):
        try:
            amount = int(amount)
        except (TypeError, ValueError):
            raise MalformedResponseError(f"Non-numeric amount: {amount!r}")
    else:
        amount = None
    return EligibilityResult(status_code=code, amount=amount, proof=data.get("proof") or None)


def is_rate_limited(error: Exception) -> bool:
    if not isinstance(error, requests.HTTPError):
        return False
    return error.response is not None and error.response.status_code == 429


def backoff_delay(error: Exception, attempt: int) -> float:
    """Seconds to wait after a failed attempt (attempt counts from 1)."""
    if is_rate_limited(error):
        return 5 + attempt * 2
    return attempt * 1


async def fetch_eligibility(
    client: EligibilityClient,
    address: str,
    signature: str,
    max_attempts: int = config.ELIGIBILITY_MAX_ATTEMPTS,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    executor: Optional[Executor] = None,
) -> EligibilityResult:
    """Queries eligibility with bounded retries.
    Raises ExhaustedRetriesError (chained from the last failure) after max_attempts.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")
    loop = asyncio.get_running_loop()
    wallet_short = shorten_address(address)
    last_error: Optional[Exception] = None

    for attempt in range(1, max_attempts + 1):
        try:
            return await loop.run_in_executor(executor, client.check_eligibility, address, signature)
        except MalformedResponseError as e:
            logger.error(f"{wallet_short}: malformed eligibility response: {e}")
            raise
        except Exception as e:
            last_error = e
            if attempt == max_attempts:
                break
            delay = backoff_delay(e, attempt)
            if is_rate_limited(e):
                logger.warning(
                    f"{wallet_short}: rate limited, retrying in {delay}s ({attempt}/{max_attempts})"
                )
            else:
                logger.warning(
                    f"{wallet_short}: request failed ({e}), retrying in {delay}s ({attempt}/{max_attempts})"
                )
            await sleep(delay)

    logger.error(f"{wallet_short}: eligibility check failed after {max_attempts} attempts: {last_error}")
    raise ExhaustedRetriesError(address, max_attempts, last_error) from last_error
