"""apns-push: async client for Apple's Push Notification service."""

from apns_push.push import *  # noqa: F401,F403
from apns_push.push import __all__

__version__ = "1.0.0"
