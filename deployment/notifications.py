"""
Deployment alerts via email and/or Slack
"""

import logging
import smtplib
from datetime import datetime
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Dict, Optional

import requests

logger = logging.getLogger(__name__)


class Notifier:
    def __init__(self, slack_webhook: Optional[str] = None, smtp_server: str = "smtp.gmail.com",
                 smtp_port: int = 587, smtp_username: Optional[str] = None,
                 smtp_password: Optional[str] = None, notification_email: Optional[str] = None):
        self.slack_webhook = slack_webhook
        self.smtp_server = smtp_server
        self.smtp_port = smtp_port
        self.smtp_username = smtp_username
        self.smtp_password = smtp_password
        self.notification_email = notification_email

    @classmethod
    def from_config(cls, config) -> "Notifier":
        return cls(
            slack_webhook=config.slack_webhook,
            smtp_server=config.smtp_server,
            smtp_port=config.smtp_port,
            smtp_username=config.smtp_username,
            smtp_password=config.smtp_password,
            notification_email=config.notification_email,
        )

    def send(self, message: str, fields: Optional[Dict[str, str]] = None):
        """Send alert via email and/or Slack"""
        fields = fields or {}
        if self.notification_email:
            self._send_email_alert(message, fields)

        if self.slack_webhook:
            self._send_slack_alert(message, fields)

    def _send_email_alert(self, message, fields):
        try:
            if not all([self.smtp_username, self.smtp_password, self.notification_email]):
                logger.warning("Email notification not configured")
                return

            msg = MIMEMultipart()
            msg['From'] = self.smtp_username
            msg['To'] = self.notification_email
            msg['Subject'] = "CredentialBox Deployment Alert"

            details = "\n".join(f"- {key}: {value}" for key, value in fields.items())
            body = (
                "CredentialBox Deployment Alert\n\n"
                f"Time: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}\n"
                f"Message: {message}\n"
            )
            if details:
                body += f"\nDetails:\n{details}\n"

            msg.attach(MIMEText(body, 'plain'))

            server = smtplib.SMTP(self.smtp_server, self.smtp_port)
            try:
                server.starttls()
                server.login(self.smtp_username, self.smtp_password)
                server.send_message(msg)
            finally:
                server.quit()

            logger.info("Email alert sent successfully")

        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send email alert: {e}")

    def _send_slack_alert(self, message, fields):
        try:
            payload = {
                "text": f"CredentialBox Deployment: {message}",
                "attachments": [
                    {
                        "fields": [
                            {"title": key, "value": str(value), "short": True}
                            for key, value in fields.items()
                        ]
                    }
                ]
            }

            response = requests.post(self.slack_webhook, json=payload, timeout=10)
            response.raise_for_status()

            logger.info("Slack alert sent successfully")

        except requests.exceptions.RequestException as e:
            logger.error(f"Failed to send Slack alert: {e}")
