from channelhub.models.account import Account
from channelhub.models.subscription import Subscription
from channelhub.models.video import Video, WatchHistoryEntry

__all__ = [
    "Account",
    "Subscription",
    "Video",
    "WatchHistoryEntry",
]
