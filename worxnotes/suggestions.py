"""
Suggestion side-channel.

``SuggestionMailer`` runs server-side behind ``/functions/v1/send-suggestion``
and forwards the suggestion to Resend. ``SuggestionClient`` is the feedback
dialog's half: it posts to that endpoint with the public API key.
"""
import html
import logging
from datetime import datetime
from typing import Optional

import httpx

from worxnotes.errors import SuggestionError
from worxnotes.notifications import NotificationChannel

logger = logging.getLogger(__name__)

SUBJECT = "New Suggestion from Worx Notes"
FUNCTION_PATH = "/functions/v1/send-suggestion"


def format_suggestion_email(
    suggestion: str, user_email: Optional[str], sent_at: datetime
) -> tuple[str, str]:
    """Return the (html, text) bodies of the notification email."""
    stamp = sent_at.strftime("%m/%d/%Y, %I:%M:%S %p")
    contact_html = (
        f"<p><strong>User Email:</strong> {html.escape(user_email)}</p>"
        if user_email
        else "<p><em>No contact email provided</em></p>"
    )
    body_html = (
        "<h2>New Suggestion from Worx Notes</h2>\n"
        "<p><strong>Suggestion:</strong></p>\n"
        f"<p>{html.escape(suggestion).replace(chr(10), '<br>')}</p>\n"
        f"{contact_html}\n"
        "<hr>\n"
        f"<p><small>Sent from Worx Notes application at {stamp}</small></p>\n"
    )
    contact_text = f"User Email: {user_email}" if user_email else "No contact email provided"
    body_text = (
        "New Suggestion from Worx Notes\n\n"
        f"Suggestion:\n{suggestion}\n\n"
        f"{contact_text}\n\n"
        "---\n"
        f"Sent from Worx Notes application at {stamp}\n"
    )
    return body_html, body_text


class SuggestionMailer:
    def __init__(
        self,
        api_key: Optional[str],
        api_url: str,
        sender: str,
        recipient: str,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.api_url = api_url
        self.sender = sender
        self.recipient = recipient
        self._transport = transport

    async def send(self, suggestion: str, user_email: Optional[str] = None) -> str:
        """Send one suggestion, returning the provider's message id."""
        if not self.api_key:
            raise SuggestionError("RESEND_API_KEY is not configured")
        if not suggestion or not suggestion.strip():
            raise SuggestionError("Suggestion text is required")

        body_html, body_text = format_suggestion_email(suggestion, user_email, datetime.now())
        payload = {
            "from": self.sender,
            "to": [self.recipient],
            "subject": SUBJECT,
            "html": body_html,
            "text": body_text,
        }
        headers = {"Authorization": f"Bearer {self.api_key}"}

        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=httpx.Timeout(30.0)) as client:
                resp = await client.post(self.api_url, json=payload, headers=headers)
        except httpx.HTTPError as exc:
            raise SuggestionError(f"Resend API error: {exc}") from exc

        if resp.status_code < 200 or resp.status_code >= 300:
            raise SuggestionError(f"Resend API error: {resp.status_code} - {resp.text}")
        message_id = resp.json().get("id", "")
        logger.info("Suggestion delivered (%s)", message_id)
        return message_id


class SuggestionClient:
    """Submits feedback from the dialog and reports the outcome as a toast."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        notifications: NotificationChannel,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.notifications = notifications
        self._transport = transport
        self.submitting = False

    async def submit(self, suggestion: str, user_email: str = "") -> bool:
        if not suggestion.strip():
            self.notifications.error("Error", "Please enter a suggestion")
            return False
        if self.submitting:
            return False

        body = {"suggestion": suggestion.strip()}
        if user_email.strip():
            body["userEmail"] = user_email.strip()

        self.submitting = True
        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=httpx.Timeout(30.0)) as client:
                resp = await client.post(
                    f"{self.base_url}{FUNCTION_PATH}",
                    json=body,
                    headers={"Authorization": f"Bearer {self.api_key}"},
                )
            try:
                result = resp.json()
            except ValueError:
                result = {}
            if not resp.is_success or not result.get("success"):
                raise SuggestionError(result.get("error") or "Failed to send suggestion")
        except (httpx.HTTPError, SuggestionError) as exc:
            self.notifications.error("Error", str(exc) or "Failed to send suggestion")
            return False
        finally:
            self.submitting = False

        self.notifications.success(
            "Success!", "Your suggestion has been sent. Thank you for your feedback!"
        )
        return True
