"""Session domain: the signed-in user's profile, notifications and banner."""

from leadboard.domains.dashboard.ingest import DataProvider
from leadboard.domains.session.profile import (
    get_banner,
    get_notifications,
    get_user_data,
    unread_count,
)


def run(provider: DataProvider) -> dict:
    notifications = get_notifications(provider)
    return {
        "user": get_user_data(provider),
        "notifications": notifications,
        "unread_notifications": unread_count(notifications),
        "banner": get_banner(provider),
    }
