"""Session data passed through from the provider: profile, notifications, banner."""

import logging

from leadboard.domains.dashboard.ingest import DataProvider
from leadboard.utils.types import Record, RecordList

logger = logging.getLogger(__name__)

EMPTY_BANNER = {"active": False, "text": "", "style": "", "link_url": ""}


def get_user_data(provider: DataProvider) -> Record:
    return dict(provider.get_user_profile())


def get_notifications(provider: DataProvider) -> RecordList:
    """Notifications newest first; entries without a timestamp sort last."""
    notifications = [dict(n) for n in provider.get_notifications()]
    notifications.sort(key=lambda n: str(n.get("timestamp") or ""), reverse=True)
    return notifications


def unread_count(notifications: RecordList) -> int:
    return sum(1 for n in notifications if not n.get("read", False))


def get_banner(provider: DataProvider) -> Record:
    banner = provider.get_banner()
    if not banner:
        logger.debug("No banner configured")
        return dict(EMPTY_BANNER)
    return {**EMPTY_BANNER, **banner}
