"""Client for the Terms-and-Conditions API."""

import httpx

from authgate.core.errors import ExternalServiceError, NotFoundError
from authgate.core.logging import get_logger
from authgate.core.timestamps import parse_iso
from authgate.domain.entities.user_profile import TermsAndConditions

logger = get_logger(__name__)

SERVICE_NAME = "tnc-api"


class TnCAPIClient:
    """Fetches the latest published Terms and Conditions."""

    def __init__(self, url: str, application_key: str, timeout: float = 10.0) -> None:
        self._url = url
        self._application_key = application_key
        self._timeout = timeout

    async def get_latest(self) -> TermsAndConditions:
        """Fetch the latest Terms and Conditions.

        Raises:
            NotFoundError: If none is published.
            ExternalServiceError: On transport errors or other statuses.
        """
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.get(
                    self._url, headers={"X-APPLICATION-KEY": self._application_key}
                )
        except httpx.HTTPError as e:
            logger.error("TNC API request failed", error=str(e))
            raise ExternalServiceError(SERVICE_NAME, str(e)) from e

        if response.status_code == 404:
            raise NotFoundError()
        if response.status_code != 200:
            raise ExternalServiceError(
                SERVICE_NAME, f"Fail on retrieving Terms and Condition: HTTP {response.status_code}"
            )

        data = response.json()
        return TermsAndConditions(
            version=data["version"],
            created_at=parse_iso(data.get("createdAt")),
            content=data.get("content") or {},
        )
