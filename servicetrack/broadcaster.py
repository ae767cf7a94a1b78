"""
Change broadcaster.

Fans a payload-less "something changed" signal out to every subscribed
cache. One instance is built by the application's composition root and
handed to each cache; there is no module-level registry.
"""

import logging
from typing import Callable, List

logger = logging.getLogger(__name__)

Callback = Callable[[], None]


class Subscription:
    """Handle returned by ChangeBroadcaster.subscribe."""

    def __init__(self, broadcaster: "ChangeBroadcaster", callback: Callback):
        self._broadcaster = broadcaster
        self.callback = callback

    @property
    def active(self) -> bool:
        return self in self._broadcaster._subscriptions

    def unsubscribe(self) -> None:
        self._broadcaster.unsubscribe(self)


class ChangeBroadcaster:
    """Publish/subscribe registry of zero-argument change callbacks."""

    def __init__(self):
        self._subscriptions: List[Subscription] = []
        self.notify_count = 0

    def __len__(self) -> int:
        return len(self._subscriptions)

    def subscribe(self, callback: Callback) -> Subscription:
        """Register a callback. Pair with unsubscribe on teardown."""
        subscription = Subscription(self, callback)
        self._subscriptions.append(subscription)
        logger.debug(f"Subscribed ({len(self._subscriptions)} active)")
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        """Remove a subscription. Unknown or already-removed handles are ignored."""
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)
            logger.debug(f"Unsubscribed ({len(self._subscriptions)} active)")

    def notify(self) -> None:
        """
        Invoke every registered callback once, synchronously.

        Iterates over a copy of the registry so a callback may unsubscribe
        (itself or another) mid-notification. Returns once all callbacks
        have been invoked; any work they schedule may still be pending.
        """
        self.notify_count += 1
        subscriptions = list(self._subscriptions)
        logger.debug(f"Notifying {len(subscriptions)} subscriber(s)")
        for subscription in subscriptions:
            if not subscription.active:
                continue
            try:
                subscription.callback()
            except Exception:
                logger.exception("Change callback failed")
