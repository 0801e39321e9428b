"""
Email Notifier
Approval mails: pending items to reviewers, outcomes to the owner
"""

import asyncio
import logging
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Dict, List, Optional

import aiosmtplib

from app.auth.roles import Role
from app.config import settings
from app.errors import UpstreamError
from app.models.user import User
from app.store import Collection, DocumentStore

logger = logging.getLogger(__name__)


class EmailNotifier:
    """Computes recipients from the user collection and sends over SMTP"""

    def __init__(self, store: DocumentStore, config=settings):
        self.store = store
        self.config = config

    @property
    def smtp_configured(self) -> bool:
        return bool(self.config.SMTP_HOST and self.config.SMTP_USER and self.config.SMTP_PASSWORD)

    async def reviewers(self) -> List[User]:
        """Active admin and faculty accounts"""
        docs = await self.store.find(
            Collection.USERS,
            {"role": {"$in": [Role.ADMIN.value, Role.FACULTY.value]}, "is_active": True},
        )
        return [User.model_validate(d) for d in docs]

    async def notify_reviewers(self, subject: str, message: str, details: Optional[Dict[str, str]] = None) -> int:
        """
        Tell every reviewer that something is waiting for approval

        Returns the number of messages handed to the mail server.
        """
        if not self.config.EMAIL_NOTIFICATIONS_ENABLED:
            return 0

        reviewers = await self.reviewers()
        if not reviewers:
            logger.info("No reviewers found to notify")
            return 0

        details = details or {}
        results = await asyncio.gather(
            *[
                self.send(
                    reviewer.email,
                    subject,
                    self._render(subject, reviewer.full_name, message, details),
                )
                for reviewer in reviewers
            ],
            return_exceptions=True,
        )

        sent = 0
        for reviewer, result in zip(reviewers, results):
            if isinstance(result, Exception):
                logger.error("Reviewer notification to %s failed: %s", reviewer.email, result)
            else:
                sent += 1
        logger.info("Notifications sent to %d reviewer(s)", sent)
        return sent

    async def notify_owner(
        self,
        owner_id: str,
        kind: str,
        name: str,
        approved: bool,
        actor_name: str,
        details: Optional[Dict[str, str]] = None,
    ) -> bool:
        """Tell the owner of an event or club how review went"""
        if not self.config.EMAIL_NOTIFICATIONS_ENABLED:
            return False

        doc = await self.store.find_by_id(Collection.USERS, owner_id)
        if doc is None:
            logger.warning("Owner %s of %s '%s' not found, skipping mail", owner_id, kind, name)
            return False
        owner = User.model_validate(doc)

        outcome = "approved" if approved else "rejected"
        subject = f"{kind} {outcome.capitalize()}: {name}"
        message = f'Your {kind.lower()} "{name}" has been {outcome} by {actor_name}.'
        if not approved:
            message += " Please contact the administration if you have any questions."
            details = {}

        await self.send(owner.email, subject, self._render(subject, owner.full_name, message, details or {}))
        logger.info("%s %s notification sent to %s", kind, outcome, owner.email)
        return True

    def _render(self, subject: str, name: str, message: str, details: Dict[str, str]) -> MIMEMultipart:
        rows = "".join(f"<li><strong>{k}:</strong> {v}</li>" for k, v in details.items() if v)
        html_body = f"""
        <html>
          <body style="font-family: Arial, sans-serif; color: #333;">
            <div style="max-width: 600px; margin: 0 auto; padding: 20px;">
              <h2 style="color: #1976d2;">{self.config.APP_NAME} - {subject}</h2>
              <p>Hello {name},</p>
              <p>{message}</p>
              {f"<ul>{rows}</ul>" if rows else ""}
              <p><a href="{self.config.CLIENT_URL}">Open {self.config.APP_NAME}</a></p>
              <hr style="border: none; border-top: 1px solid #ddd; margin: 30px 0;">
              <p style="color: #666; font-size: 12px;">This is an automated notification. Please do not reply.</p>
            </div>
          </body>
        </html>
        """
        text_lines = [f"Hello {name},", "", message, ""]
        text_lines += [f"- {k}: {v}" for k, v in details.items() if v]
        text_lines += ["", f"{self.config.CLIENT_URL}"]

        email = MIMEMultipart("alternative")
        email["Subject"] = subject
        email["From"] = self.config.EMAIL_FROM
        email.attach(MIMEText("\n".join(text_lines), "plain"))
        email.attach(MIMEText(html_body, "html"))
        return email

    async def send(self, to: str, subject: str, message: MIMEMultipart) -> None:
        message["To"] = to

        if not self.smtp_configured:
            # Development mode, no SMTP configured
            logger.info("EMAIL (development mode) to=%s subject=%s", to, subject)
            return

        try:
            await aiosmtplib.send(
                message,
                hostname=self.config.SMTP_HOST,
                port=self.config.SMTP_PORT,
                username=self.config.SMTP_USER,
                password=self.config.SMTP_PASSWORD,
                start_tls=True,
                timeout=self.config.MAIL_TIMEOUT_SECONDS,
            )
        except (aiosmtplib.SMTPException, OSError, asyncio.TimeoutError) as e:
            raise UpstreamError("Email delivery failed", detail=f"to={to} subject={subject}: {e}") from e
