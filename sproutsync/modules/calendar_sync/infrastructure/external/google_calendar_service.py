# 📄 File: sproutsync/modules/calendar_sync/infrastructure/external/google_calendar_service.py
# 🧭 Purpose (Layman Explanation):
# Talks to Google Calendar for a user: asks for permission, keeps the permission fresh and
# puts plant chores into their calendar as events with reminders.
#
# 🧪 Purpose (Technical Summary):
# OAuth 2.0 offline-access flow (google-auth-oauthlib Flow) and Calendar v3 event CRUD through
# google-api-python-client. Tokens are stored on UserSettingsModel, wrapped in google-auth
# Credentials and refreshed when expired. Blocking client calls run in a worker thread.
#
# 🔗 Dependencies:
# - google-auth: Credentials, token refresh and revoke transport
# - google-auth-oauthlib: consent URL and code exchange
# - google-api-python-client: Calendar v3 discovery client
# - user_management user_settings_service (token persistence)
#
# 🔄 Connected Modules / Calls From:
# - calendar_sync.domain.services.task_sync_service
# - calendar_sync.presentation.api.v1.google_calendar

"""
Google Calendar Integration

Flow:
1. get_auth_url() sends the user to Google's consent screen (offline access)
2. exchange_code_for_tokens() stores access + refresh tokens on the user's settings
3. Event calls build Credentials from the stored tokens, refreshing them when expired
"""

import asyncio
import logging
from datetime import timedelta, timezone
from typing import Any, Dict

from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import Flow
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from sqlalchemy.ext.asyncio import AsyncSession

from sproutsync.modules.user_management.domain.services.user_settings_service import (
    get_user_settings,
    upsert_user_settings,
)
from sproutsync.shared.config.settings import get_settings
from sproutsync.shared.core.exceptions import ExternalServiceError, SproutSyncException, ValidationError
from sproutsync.shared.infrastructure.database.connection import utc_now
from sproutsync.shared.utils.timezone import as_utc

logger = logging.getLogger(__name__)

GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_REVOKE_URL = "https://oauth2.googleapis.com/revoke"
PRIMARY_CALENDAR = "primary"

CALENDAR_SCOPES = [
    "https://www.googleapis.com/auth/calendar",
    "https://www.googleapis.com/auth/calendar.events",
]

TASK_EVENT_LABELS = {
    "watering": "Water Plant",
    "fertilizing": "Fertilize Plant",
    "spraying": "Spray Plant",
    "pruning": "Prune Plant",
    "sunlightRotation": "Rotate Plant for Sun",
}

EVENT_DURATION = timedelta(minutes=30)
DEFAULT_TOKEN_LIFETIME = timedelta(hours=1)


def get_task_label(task_key: str) -> str:
    """Calendar label for a task key, e.g. watering -> "Water Plant"."""
    return TASK_EVENT_LABELS.get(task_key, f"{task_key} Plant")


def build_task_event(task: Any, plant_name: str, reminder_minutes: int) -> Dict[str, Any]:
    """
    Calendar v3 event body for a care task.

    The event starts at the task's next due moment and lasts 30 minutes (UTC), with popup
    and email reminders ``reminder_minutes`` before.
    """
    start = as_utc(task.next_due_on)
    label = get_task_label(task.task_key)
    return {
        "summary": f"{label} - {plant_name}",
        "description": f"Plant care reminder: {label} for {plant_name}",
        "start": {"dateTime": start.isoformat(), "timeZone": "UTC"},
        "end": {"dateTime": (start + EVENT_DURATION).isoformat(), "timeZone": "UTC"},
        "reminders": {
            "useDefault": False,
            "overrides": [
                {"method": "popup", "minutes": reminder_minutes},
                {"method": "email", "minutes": reminder_minutes},
            ],
        },
    }


def build_calendar_client(credentials: Credentials):
    """Calendar v3 resource for ``credentials``."""
    return build("calendar", "v3", credentials=credentials, cache_discovery=False)


def revoke_token(token: str, timeout: float) -> int:
    """POST ``token`` to Google's revoke endpoint and return the HTTP status."""
    response = Request()(
        url=GOOGLE_REVOKE_URL,
        method="POST",
        body=f"token={token}".encode(),
        headers={"Content-Type": "application/x-www-form-urlencoded"},
        timeout=timeout,
    )
    return response.status


def _to_google_expiry(value):
    # google-auth compares expiry as naive UTC
    aware = as_utc(value)
    return aware.replace(tzinfo=None) if aware else None


def _from_google_expiry(value):
    if value is None:
        return utc_now() + DEFAULT_TOKEN_LIFETIME
    return value.replace(tzinfo=timezone.utc)


class GoogleCalendarService:
    """
    Per-session Google Calendar client.

    Token changes are flushed to the caller's session; the caller owns the commit.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.settings = get_settings()
        self.client_id = self.settings.GOOGLE_CLIENT_ID
        self.client_secret = self.settings.GOOGLE_CLIENT_SECRET
        self.redirect_uri = self.settings.google_calendar_redirect_uri
        self.timeout = self.settings.GOOGLE_HTTP_TIMEOUT

    # =========================================================================
    # OAUTH
    # =========================================================================

    def _flow(self) -> Flow:
        # No PKCE verifier: the callback builds a fresh Flow with nothing carried over
        return Flow.from_client_config(
            {
                "web": {
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                    "auth_uri": GOOGLE_AUTH_URL,
                    "token_uri": GOOGLE_TOKEN_URL,
                }
            },
            scopes=CALENDAR_SCOPES,
            redirect_uri=self.redirect_uri,
            autogenerate_code_verifier=False,
        )

    def get_auth_url(self, user_id: str) -> str:
        """Consent URL; ``state`` carries the user id back to the callback."""
        auth_url, _ = self._flow().authorization_url(
            access_type="offline",
            prompt="consent",
            state=user_id,
        )
        return auth_url

    async def exchange_code_for_tokens(self, code: str, user_id: str) -> Dict[str, Any]:
        """
        Trade the consent code for tokens and store them on the user's settings.

        Raises:
            ExternalServiceError: Google rejected the code or returned no refresh token
        """
        flow = self._flow()
        try:
            await asyncio.to_thread(flow.fetch_token, code=code)
        except Exception as e:
            logger.error(f"❌ Google token exchange failed for user {user_id}: {e}")
            raise ExternalServiceError(
                "Failed to exchange authorization code for tokens",
                service="google_calendar",
                service_response=str(e)[:500],
            ) from e

        credentials = flow.credentials
        if not credentials.token or not credentials.refresh_token:
            logger.error(f"❌ Google token exchange for user {user_id} returned no refresh token")
            raise ExternalServiceError("Failed to exchange authorization code for tokens", service="google_calendar")

        expiry = _from_google_expiry(credentials.expiry)
        await upsert_user_settings(
            self.session,
            user_id,
            google_calendar_access_token=credentials.token,
            google_calendar_refresh_token=credentials.refresh_token,
            google_calendar_token_expiry=expiry,
        )
        logger.info(f"📅 Stored Google Calendar tokens for user {user_id}")
        return {
            "access_token": credentials.token,
            "refresh_token": credentials.refresh_token,
            "expiry_date": expiry,
        }

    async def get_credentials(self, user_id: str) -> Credentials:
        """
        Stored tokens as google-auth Credentials, refreshed first when expired.

        Raises:
            ValidationError: The user never granted calendar access
            ExternalServiceError: Refresh failed
        """
        user_settings = await get_user_settings(self.session, user_id)
        if (
            user_settings is None
            or not user_settings.google_calendar_access_token
            or not user_settings.google_calendar_refresh_token
        ):
            raise ValidationError("User has not authorized Google Calendar access")

        credentials = Credentials(
            token=user_settings.google_calendar_access_token,
            refresh_token=user_settings.google_calendar_refresh_token,
            token_uri=GOOGLE_TOKEN_URL,
            client_id=self.client_id,
            client_secret=self.client_secret,
            scopes=CALENDAR_SCOPES,
            expiry=_to_google_expiry(user_settings.google_calendar_token_expiry),
        )
        if not credentials.expired:
            return credentials

        try:
            await asyncio.to_thread(credentials.refresh, Request())
        except GoogleAuthError as e:
            logger.error(f"❌ Error refreshing Google token for user {user_id}: {e}")
            raise ExternalServiceError("Failed to refresh access token", service="google_calendar") from e

        user_settings.google_calendar_access_token = credentials.token
        user_settings.google_calendar_token_expiry = _from_google_expiry(credentials.expiry)
        await self.session.flush()
        logger.debug(f"🔄 Refreshed Google Calendar token for user {user_id}")
        return credentials

    async def get_access_token(self, user_id: str) -> str:
        return (await self.get_credentials(user_id)).token

    async def has_valid_access(self, user_id: str) -> bool:
        try:
            await self.get_credentials(user_id)
            return True
        except SproutSyncException as e:
            logger.warning(f"⚠️ Google Calendar access check failed for user {user_id}: {e.message}")
            return False

    async def revoke_access(self, user_id: str) -> None:
        """Revoke at Google (best effort) and always clear the stored calendar state."""
        user_settings = await get_user_settings(self.session, user_id)
        token = user_settings.google_calendar_access_token if user_settings else None
        if token:
            try:
                status_code = await asyncio.to_thread(revoke_token, token, self.timeout)
                if status_code >= 400:
                    logger.warning(f"⚠️ Google refused token revocation for user {user_id}: {status_code}")
            except GoogleAuthError as e:
                logger.warning(f"⚠️ Google token revocation failed for user {user_id}: {e}")

        await upsert_user_settings(
            self.session,
            user_id,
            google_calendar_sync_enabled=False,
            google_calendar_access_token=None,
            google_calendar_refresh_token=None,
            google_calendar_token_expiry=None,
            synced_plant_ids=[],
        )
        logger.info(f"🔒 Revoked Google Calendar access for user {user_id}")

    # =========================================================================
    # EVENTS
    # =========================================================================

    async def _events(self, user_id: str):
        credentials = await self.get_credentials(user_id)
        return build_calendar_client(credentials).events()

    async def create_task_event(
        self,
        user_id: str,
        task: Any,
        plant_name: str,
        reminder_minutes: int = 30,
    ) -> str:
        """
        Insert an event for ``task`` in the user's primary calendar.

        Returns:
            str: Google event id
        """
        events = await self._events(user_id)
        body = build_task_event(task, plant_name, reminder_minutes)
        body["source"] = {"title": self.settings.APP_NAME, "url": self.settings.FRONTEND_URL}

        try:
            created = await asyncio.to_thread(events.insert(calendarId=PRIMARY_CALENDAR, body=body).execute)
        except HttpError as e:
            logger.error(f"❌ Error creating calendar event for task {task.id}: {e}")
            raise ExternalServiceError(
                "Failed to create calendar event",
                service="google_calendar",
                service_response=str(e)[:500],
            ) from e
        return created.get("id", "")

    async def update_task_event(
        self,
        user_id: str,
        event_id: str,
        task: Any,
        plant_name: str,
        reminder_minutes: int = 30,
    ) -> None:
        events = await self._events(user_id)
        body = build_task_event(task, plant_name, reminder_minutes)

        try:
            await asyncio.to_thread(
                events.update(calendarId=PRIMARY_CALENDAR, eventId=event_id, body=body).execute
            )
        except HttpError as e:
            logger.error(f"❌ Error updating calendar event {event_id}: {e}")
            raise ExternalServiceError(
                "Failed to update calendar event",
                service="google_calendar",
                service_response=str(e)[:500],
            ) from e

    async def delete_task_event(self, user_id: str, event_id: str) -> None:
        """Delete an event; failures are logged since the event may already be gone."""
        try:
            events = await self._events(user_id)
            await asyncio.to_thread(events.delete(calendarId=PRIMARY_CALENDAR, eventId=event_id).execute)
        except HttpError as e:
            if e.resp.status not in (404, 410):
                logger.warning(f"⚠️ Google refused to delete event {event_id}: {e.resp.status}")
        except SproutSyncException as e:
            logger.error(f"❌ Error deleting calendar event {event_id}: {e.message}")
