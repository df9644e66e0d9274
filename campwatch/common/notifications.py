"""
Notification services for the campsite availability monitor
"""
import logging
import re
from abc import ABC, abstractmethod
from typing import Dict, Optional
from urllib.parse import quote
import httpx
from pydantic import BaseModel

from .models import NotificationPayload, WatchRecord
from .config import Config

logger = logging.getLogger(__name__)

PLACEHOLDER = re.compile(r"\{(\w+)\}")


def render_template(template: str, values: Dict[str, object]) -> str:
    """Substitute every occurrence of each {key} placeholder in a single pass"""
    def substitute(match):
        key = match.group(1)
        return str(values[key]) if key in values else match.group(0)

    return PLACEHOLDER.sub(substitute, template)


class MessageTemplate(BaseModel):
    subject: str
    text: str
    html: str
    
    def render(self, values: Dict[str, object]) -> "MessageTemplate":
        return MessageTemplate(
            subject=render_template(self.subject, values),
            text=render_template(self.text, values),
            html=render_template(self.html, values),
        )


AVAILABLE_TEMPLATE = MessageTemplate(
    subject="{campsite_name} {campsite_number} is Available for Your Dates! 🏕️",
    text="""Great news! The campsite you're interested in is now available!

Campsite Details:
- Campground: {campsite_name}
- Campsite: {campsite_number}
- Dates Available: {start_date} through {end_date}

Book now at: {booking_url}

Don't wait - available campsites can be booked quickly!

Happy Camping! 🏕️

---
To stop receiving these alerts, visit: {base_url}/api/reservations/disable-monitoring/{reservation_id}/{email_address}""",
    html="""<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
  <h2>Great news! The campsite you're interested in is now available!</h2>
  <div style="margin: 20px 0;">
    <strong>Campsite Details:</strong>
    <ul>
      <li>Campground: {campsite_name}</li>
      <li>Campsite: {campsite_number}</li>
      <li>Dates Available: {start_date} through {end_date}</li>
    </ul>
  </div>
  <p><a href="{booking_url}" style="display: inline-block; background-color: #2c7744; color: white; padding: 10px 20px; text-decoration: none; border-radius: 4px;">Book Now</a></p>
  <p>Don't wait - available campsites can be booked quickly!</p>
  <p>Happy Camping! 🏕️</p>
  <hr style="border: 1px solid #eee; margin: 20px 0;">
  <p style="font-size: 12px; color: #666;">
    To stop receiving these alerts click <a href="{base_url}/api/reservations/disable-monitoring/{reservation_id}/{email_address}">here</a>
  </p>
</div>""",
)


CONFIRMATION_TEMPLATE = MessageTemplate(
    subject="Campsite Alert Confirmed for {campsite_name} {campsite_number} 🏕️",
    text="""Your campsite alert has been successfully created!

We'll monitor availability for:
- Campground: {campsite_name}
- Campsite: {campsite_number}
- Dates Requested: {start_date} through {end_date}

You'll receive an email as soon as this campsite becomes available for your dates.

View the campsite: {booking_url}

---
To stop receiving these alerts, visit: {base_url}/api/reservations/disable-monitoring/{reservation_id}/{email_address}

Happy Camping! 🏕️""",
    html="""<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
  <h2>Your campsite alert has been successfully created!</h2>
  <div style="margin: 20px 0;">
    <strong>We'll monitor availability for:</strong>
    <ul>
      <li>Campground: {campsite_name}</li>
      <li>Campsite: {campsite_number}</li>
      <li>Dates Requested: {start_date} through {end_date}</li>
    </ul>
  </div>
  <p>You'll receive an email as soon as this campsite becomes available for your dates.</p>
  <p><a href="{booking_url}" style="display: inline-block; background-color: #2c7744; color: white; padding: 10px 20px; text-decoration: none; border-radius: 4px;">View Campsite</a></p>
  <p>Happy Camping! 🏕️</p>
  <hr style="border: 1px solid #eee; margin: 20px 0;">
  <p style="font-size: 12px; color: #666;">
    To stop receiving these alerts click <a href="{base_url}/api/reservations/disable-monitoring/{reservation_id}/{email_address}">here</a>
  </p>
</div>""",
)


class NotificationProvider(ABC):
    """Base class for notification providers"""
    
    @abstractmethod
    async def send(self, payload: NotificationPayload) -> bool:
        """Send notification, return True if successful"""
        pass
    
    async def close(self):
        pass


class EmailNotifier(NotificationProvider):
    """SendGrid email notifications"""
    
    def __init__(self, api_key: str, from_address: str, from_name: str = "Campsite Alerts"):
        self.api_key = api_key
        self.from_address = from_address
        self.from_name = from_name
        self.client = httpx.AsyncClient()
    
    async def send(self, payload: NotificationPayload) -> bool:
        content = [{"type": "text/plain", "value": payload.text}]
        if payload.html:
            content.append({"type": "text/html", "value": payload.html})
        try:
            response = await self.client.post(
                "https://api.sendgrid.com/v3/mail/send",
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json"
                },
                json={
                    "personalizations": [{"to": [{"email": payload.recipient}]}],
                    "from": {"email": self.from_address, "name": self.from_name},
                    "subject": payload.subject,
                    "content": content
                }
            )
            success = response.status_code in (200, 202)
            if not success:
                logger.error(f"Email send failed: {response.status_code} - {response.text}")
            return success
        except Exception as e:
            logger.error(f"Email send error: {e}")
            return False
    
    async def close(self):
        await self.client.aclose()


class ConsoleNotifier(NotificationProvider):
    """Console output for testing"""
    
    async def send(self, payload: NotificationPayload) -> bool:
        print("\n" + "=" * 60)
        print(f"📢 To: {payload.recipient}")
        print(f"   {payload.subject}")
        print("-" * 60)
        print(payload.text)
        print("=" * 60 + "\n")
        return True


class WatchNotifier:
    """Renders watch-record emails and hands them to a provider"""
    
    def __init__(self, provider: NotificationProvider, base_url: str):
        self.provider = provider
        self.base_url = base_url.rstrip("/")
    
    def template_values(self, record: WatchRecord) -> Dict[str, object]:
        return {
            "campsite_name": record.campsite_name,
            "campsite_number": record.campsite_number,
            "campsite_id": record.campsite_id,
            "start_date": record.start_date.isoformat(),
            "end_date": record.end_date.isoformat(),
            "base_url": self.base_url,
            "reservation_id": record.id,
            "email_address": quote(record.email_address, safe=""),
            "booking_url": record.booking_url,
        }
    
    def build_payload(self, template: MessageTemplate, record: WatchRecord) -> NotificationPayload:
        message = template.render(self.template_values(record))
        return NotificationPayload(
            recipient=record.email_address,
            subject=message.subject,
            text=message.text,
            html=message.html,
        )
    
    async def notify_available(self, record: WatchRecord) -> bool:
        """Send the 'campsite is available' alert"""
        return await self._send(self.build_payload(AVAILABLE_TEMPLATE, record), record)
    
    async def notify_watch_created(self, record: WatchRecord) -> bool:
        """Send the 'alert confirmed' email for a new watch"""
        return await self._send(self.build_payload(CONFIRMATION_TEMPLATE, record), record)
    
    async def _send(self, payload: NotificationPayload, record: WatchRecord) -> bool:
        try:
            sent = await self.provider.send(payload)
        except Exception as e:
            logger.error(f"Notification provider error for watch {record.id}: {e}")
            sent = False
        if sent:
            logger.info(f"Email notification sent for campsite {record.campsite_id} to {record.email_address}")
        else:
            logger.warning(f"Failed to send email notification for campsite {record.campsite_id} to {record.email_address}")
        return sent
    
    async def close(self):
        await self.provider.close()


def build_notifier(config: Config, provider: Optional[NotificationProvider] = None) -> WatchNotifier:
    """Pick the configured provider, falling back to the console"""
    if provider is None:
        email = config.notifications.email
        if email.enabled and email.sendgrid_api_key:
            provider = EmailNotifier(
                api_key=email.sendgrid_api_key,
                from_address=email.from_address,
                from_name=email.from_name
            )
            logger.info("Email notifications enabled")
        else:
            if email.enabled:
                logger.warning("Email notifications enabled but missing SendGrid API key")
            provider = ConsoleNotifier()
    return WatchNotifier(provider, config.notifications.base_url)
