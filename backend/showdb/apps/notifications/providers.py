from __future__ import annotations

import base64
import json
import os
import urllib.error
import urllib.request
from pathlib import Path
from typing import Tuple

from . import templates

RESEND_API_URL = os.getenv("RESEND_API_URL", "https://api.resend.com/emails")
EMAIL_FROM = os.getenv("EMAIL_FROM", "Showmen Docs <noreply@showmendocs.com>")
EMAIL_SEND_TIMEOUT_SEC = int(os.getenv("EMAIL_SEND_TIMEOUT_SEC", "15"))


class EmailProvider:
    def send(
        self,
        *,
        template_key: str,
        recipient: str,
        subject: str,
        context: dict,
        correlation_id: str | None,
    ) -> None:
        raise NotImplementedError


class NoopProvider(EmailProvider):
    def send(
        self,
        *,
        template_key: str,
        recipient: str,
        subject: str,
        context: dict,
        correlation_id: str | None,
    ) -> None:
        return None


class ResendProvider(EmailProvider):
    """Sends the rendered plain-text body through the Resend HTTP API."""

    def __init__(self, api_key: str, *, sender: str = EMAIL_FROM, url: str = RESEND_API_URL):
        self.api_key = api_key
        self.sender = sender
        self.url = url

    def _attachments(self, context: dict) -> list:
        out = []
        for item in context.get("attachments") or []:
            path = Path(item["path"])
            out.append(
                {
                    "filename": item.get("filename") or path.name,
                    "content": base64.b64encode(path.read_bytes()).decode("ascii"),
                    "content_type": item.get("content_type") or "application/octet-stream",
                }
            )
        return out

    def build_payload(self, *, template_key: str, recipient: str, subject: str, context: dict) -> dict:
        payload = {
            "from": self.sender,
            "to": [recipient],
            "subject": subject,
            "text": templates.render(template_key, context),
        }
        attachments = self._attachments(context)
        if attachments:
            payload["attachments"] = attachments
        return payload

    def send(
        self,
        *,
        template_key: str,
        recipient: str,
        subject: str,
        context: dict,
        correlation_id: str | None,
    ) -> None:
        payload = self.build_payload(
            template_key=template_key,
            recipient=recipient,
            subject=subject,
            context=context,
        )
        req = urllib.request.Request(self.url, data=json.dumps(payload).encode("utf-8"), method="POST")
        req.add_header("Content-Type", "application/json")
        req.add_header("Authorization", f"Bearer {self.api_key}")
        try:
            with urllib.request.urlopen(req, timeout=EMAIL_SEND_TIMEOUT_SEC) as resp:
                resp.read()
        except urllib.error.HTTPError as exc:
            detail = exc.read().decode("utf-8", errors="replace")
            raise RuntimeError(f"Resend API error {exc.code}: {detail}") from exc


def get_email_provider() -> Tuple[EmailProvider, bool]:
    provider_name = (
        os.getenv("NOTIFICATIONS_EMAIL_PROVIDER")
        or os.getenv("EMAIL_PROVIDER")
        or ""
    ).strip().lower()
    if not provider_name or provider_name in {"none", "noop", "disabled"}:
        return NoopProvider(), False
    if provider_name == "resend":
        api_key = (os.getenv("RESEND_API_KEY") or "").strip()
        if not api_key:
            return NoopProvider(), False
        return ResendProvider(api_key), True
    raise ValueError(f"Unsupported email provider: {provider_name}")
