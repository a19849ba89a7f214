"""
Resend email client
Transactional email over the Resend REST API
https://resend.com/docs/api-reference/emails/send-email
"""
import logging
from typing import Any, Dict, Optional

import httpx

from helpdesk.core.config import settings

logger = logging.getLogger(__name__)


class EmailClient:
    """Client for the Resend email API"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        sender: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.RESEND_API_KEY
        self.base_url = (base_url or settings.RESEND_API_URL).rstrip("/")
        self.sender = sender or settings.MAIL_FROM
        self.transport = transport

        self.headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    async def _request(self, method: str, endpoint: str, data: Optional[Dict] = None) -> Dict[str, Any]:
        """Make request to the Resend API"""
        url = f"{self.base_url}/{endpoint}"

        try:
            async with httpx.AsyncClient(timeout=30, transport=self.transport) as client:
                response = await client.request(method, url, headers=self.headers, json=data)

                if response.status_code >= 400:
                    logger.error(f"Resend API error: {response.status_code} - {response.text}")
                    return {"error": response.text, "status": response.status_code}

                return response.json()

        except httpx.HTTPError as e:
            logger.error(f"Resend API request failed: {e}")
            return {"error": str(e)}

    async def send_email(self, to: str, subject: str, html: str) -> Dict[str, Any]:
        """
        Send a single email.

        Without an API key the send is only logged and reported as simulated.
        """
        if not self.enabled:
            logger.info(f"RESEND_API_KEY not set, simulating email to {to}: {subject}")
            return {"success": True, "simulated": True}

        result = await self._request(
            "POST",
            "emails",
            {"from": self.sender, "to": [to], "subject": subject, "html": html},
        )

        if "error" in result:
            logger.error(f"Failed to send email to {to}: {result}")
            return {"success": False, "error": result["error"]}

        logger.info(f"Email sent to {to}")
        return {"success": True, "id": result.get("id")}
