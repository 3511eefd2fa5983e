# 📄 File: sproutsync/modules/notification_communication/infrastructure/external/firebase_messaging.py
# 🧭 Purpose (Layman Explanation):
# The doorway to Firebase, the service that actually delivers push notifications to
# people's browsers and phones.
#
# 🧪 Purpose (Technical Summary):
# Lazily initialised firebase-admin app from service-account settings (inline fields or a
# credentials file) and an async wrapper around messaging.send for web push messages.
#
# 🔗 Dependencies:
# - firebase-admin (credentials, messaging)
# - sproutsync.shared.config.settings
#
# 🔄 Connected Modules / Calls From:
# - notification_communication.domain.services.firebase_notification_service
# - notification_communication.domain.services.notification_service

import asyncio
import logging
from typing import Dict, Optional

import firebase_admin
from firebase_admin import credentials, exceptions, messaging

from sproutsync.shared.config.settings import get_settings
from sproutsync.shared.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

_firebase_app: Optional[firebase_admin.App] = None


def initialize_firebase() -> firebase_admin.App:
    """
    Initialise the Firebase Admin SDK once per process.

    Raises:
        ConfigurationError: No project id or credentials configured
    """
    global _firebase_app
    if _firebase_app is not None:
        return _firebase_app

    settings = get_settings()
    if settings.FIREBASE_CREDENTIALS_FILE:
        credential = credentials.Certificate(settings.FIREBASE_CREDENTIALS_FILE)
    else:
        if not settings.FIREBASE_PROJECT_ID or not settings.FIREBASE_PRIVATE_KEY or not settings.FIREBASE_CLIENT_EMAIL:
            raise ConfigurationError("Firebase is not configured", setting="FIREBASE_PROJECT_ID")
        credential = credentials.Certificate({
            "type": "service_account",
            "project_id": settings.FIREBASE_PROJECT_ID,
            "private_key": settings.FIREBASE_PRIVATE_KEY.replace("\\n", "\n"),
            "client_email": settings.FIREBASE_CLIENT_EMAIL,
            "token_uri": "https://oauth2.googleapis.com/token",
        })

    _firebase_app = firebase_admin.initialize_app(credential, {"projectId": settings.FIREBASE_PROJECT_ID})
    logger.info("🔥 Firebase Admin SDK initialized")
    return _firebase_app


def is_invalid_token_error(error: Exception) -> bool:
    """True for errors meaning the registration token is unusable and should be forgotten."""
    return isinstance(error, (messaging.UnregisteredError, exceptions.InvalidArgumentError))


class FirebaseMessagingClient:
    """Sends web push messages through FCM."""

    def __init__(self, app: Optional[firebase_admin.App] = None):
        self._app = app

    @property
    def app(self) -> firebase_admin.App:
        if self._app is None:
            self._app = initialize_firebase()
        return self._app

    async def send(
        self,
        token: str,
        title: str,
        body: str,
        data: Optional[Dict[str, str]] = None,
        icon: str = "/pwa-192x192.png",
        link: Optional[str] = None,
        tag: Optional[str] = None,
    ) -> str:
        """
        Send one notification.

        Returns:
            str: FCM message id

        Raises:
            firebase_admin.exceptions.FirebaseError: Delivery rejected by FCM
        """
        message = messaging.Message(
            token=token,
            notification=messaging.Notification(title=title, body=body),
            data=data or {},
            webpush=messaging.WebpushConfig(
                notification=messaging.WebpushNotification(
                    title=title,
                    body=body,
                    icon=icon,
                    badge=icon,
                    tag=tag,
                    require_interaction=tag is None,
                    renotify=True if tag else None,
                ),
                # FCM only accepts HTTPS links
                fcm_options=messaging.WebpushFCMOptions(link=link) if link and link.startswith("https://") else None,
            ),
        )
        # firebase-admin is blocking
        return await asyncio.to_thread(messaging.send, message, app=self.app)


_messaging_client: Optional[FirebaseMessagingClient] = None


def get_messaging_client() -> FirebaseMessagingClient:
    """Process-wide messaging client."""
    global _messaging_client
    if _messaging_client is None:
        _messaging_client = FirebaseMessagingClient()
    return _messaging_client
