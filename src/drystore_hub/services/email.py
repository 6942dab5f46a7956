"""Outbound email delivery for invitations."""

from __future__ import annotations

import html
import logging
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage

import httpx

from drystore_hub.core.settings import settings

logger = logging.getLogger(__name__)

RESEND_ENDPOINT = "https://api.resend.com/emails"
INVITATION_SUBJECT = "Convite para DryStore - Sistema de Comunicação Interna"


@dataclass
class EmailSendResult:
    provider: str
    message_id: str | None = None


class EmailSendError(RuntimeError):
    """Raised when the configured provider rejects or cannot deliver a message."""


def send_email(*, to_address: str, subject: str, html_body: str, text: str | None = None) -> EmailSendResult:
    """Deliver a message through ``settings.email_provider``."""
    provider = (settings.email_provider or "disabled").lower()
    if provider in {"disabled", "none"}:
        raise EmailSendError("EMAIL_PROVIDER disabled")
    if not settings.email_from:
        raise EmailSendError("EMAIL_FROM not configured")

    if provider == "resend":
        return _send_resend(to_address=to_address, subject=subject, html_body=html_body, text=text)
    if provider == "smtp":
        return _send_smtp(to_address=to_address, subject=subject, html_body=html_body, text=text)

    raise EmailSendError(f"Unsupported EMAIL_PROVIDER: {settings.email_provider}")


def _send_resend(*, to_address: str, subject: str, html_body: str, text: str | None) -> EmailSendResult:
    if not settings.email_api_key:
        raise EmailSendError("EMAIL_API_KEY not configured for Resend")
    payload = {
        "from": settings.email_from,
        "to": [to_address],
        "subject": subject,
        "html": html_body,
    }
    if text:
        payload["text"] = text
    headers = {
        "Authorization": f"Bearer {settings.email_api_key}",
        "Content-Type": "application/json",
    }
    try:
        with httpx.Client(timeout=settings.email_http_timeout_seconds) as client:
            resp = client.post(RESEND_ENDPOINT, json=payload, headers=headers)
    except httpx.HTTPError as exc:
        raise EmailSendError(f"Resend request failed: {exc}") from exc
    if resp.status_code >= 400:
        raise EmailSendError(f"Resend error: {resp.status_code} {resp.text}")
    data = resp.json()
    return EmailSendResult(provider="resend", message_id=data.get("id"))


def _send_smtp(*, to_address: str, subject: str, html_body: str, text: str | None) -> EmailSendResult:
    if not settings.smtp_host:
        raise EmailSendError("SMTP_HOST not configured")
    message = EmailMessage()
    message["Subject"] = subject
    message["From"] = settings.email_from
    message["To"] = to_address
    message.set_content(text or "This email requires an HTML-capable client.")
    message.add_alternative(html_body, subtype="html")

    try:
        with smtplib.SMTP(settings.smtp_host, settings.smtp_port) as server:
            if settings.smtp_use_tls:
                server.starttls()
            if settings.smtp_username and settings.smtp_password:
                server.login(settings.smtp_username, settings.smtp_password)
            server.send_message(message)
    except (OSError, smtplib.SMTPException) as exc:
        raise EmailSendError(f"SMTP delivery failed: {exc}") from exc
    return EmailSendResult(provider="smtp")


def render_invitation_email(*, inviter_name: str, invite_url: str, message: str | None) -> tuple[str, str]:
    """Return ``(html, text)`` bodies for an invitation."""
    inviter = html.escape(inviter_name)
    url = html.escape(invite_url, quote=True)
    note = (
        f'<blockquote style="border-left: 4px solid #6366F1; padding-left: 12px;">'
        f"<em>\"{html.escape(message)}\"</em></blockquote>"
        if message
        else ""
    )
    html_body = f"""
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
  <h1>Bem-vindo à DryStore!</h1>
  <p><strong>{inviter}</strong> convidou você para fazer parte do sistema de comunicação
  interna da <strong>DryStore</strong>.</p>
  {note}
  <p><a href="{url}">Aceitar Convite</a></p>
  <p>Este convite expira em {settings.invitation_expiry_days} dias. Se você não conseguir clicar
  no botão, copie e cole este link no seu navegador: {url}</p>
  <p>Se você não esperava este convite, pode ignorar este email com segurança.</p>
</div>
""".strip()
    lines = [
        f"{inviter_name} convidou você para a DryStore.",
        f'"{message}"' if message else "",
        f"Aceite o convite em: {invite_url}",
        f"Este convite expira em {settings.invitation_expiry_days} dias.",
    ]
    return html_body, "\n".join(line for line in lines if line)
