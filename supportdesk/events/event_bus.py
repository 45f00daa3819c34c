"""
Channel-based event bus for pub/sub event handling.
"""

from typing import Callable, List, Dict, Optional, Any, Set
from collections import defaultdict
import asyncio
import inspect
import logging
from datetime import datetime, timezone

from .base_event import BaseEvent

logger = logging.getLogger("supportdesk.events.event_bus")


class EventHandler:
    """Wrapper for event handler with metadata."""

    def __init__(
        self,
        handler: Callable,
        priority: int = 0,
        channel: Optional[str] = None,
        name: Optional[str] = None
    ):
        self.handler = handler
        self.priority = priority
        self.channel = channel
        self.name = name or getattr(handler, "__name__", repr(handler))

    def __repr__(self):
        return f"EventHandler(handler={self.name}, priority={self.priority})"


class EventBusStats:
    """Statistics for event bus operations."""

    def __init__(self):
        self.total_published: int = 0
        self.successful_handlers: int = 0
        self.failed_handlers: int = 0
        self.last_event_time: Optional[datetime] = None


class EventBus:
    """
    Event bus delivering events to the subscribers of a named channel.

    Features:
    - Subscribe to a channel (e.g. "curators") or to all channels
    - Handler priorities
    - Best-effort delivery: a failing handler is logged and skipped,
      never propagated to the publisher
    - Fire-and-forget or wait-for-handlers publishing
    - Middleware support
    """

    def __init__(self):
        # Subscribers by channel
        self._subscribers: Dict[str, List[EventHandler]] = defaultdict(list)

        # Wildcard subscribers (receive events from every channel)
        self._wildcard_subscribers: List[EventHandler] = []

        # Middleware for event processing
        self._middleware: List[Callable] = []

        # Statistics
        self._stats = EventBusStats()

        # Fire-and-forget deliveries still running
        self._pending: Set[asyncio.Task] = set()

    def subscribe(
        self,
        channel: Optional[str] = None,
        handler: Optional[Callable] = None,
        priority: int = 0,
        name: Optional[str] = None
    ):
        """
        Subscribe to a channel.

        Args:
            channel: Channel to subscribe to (None = all channels)
            handler: Async function taking (event)
            priority: Handler priority (higher = executed first)
            name: Subscriber name used in logs

        Returns:
            Unsubscribe function or decorator

        Examples:
            # Direct subscription
            unsubscribe = event_bus.subscribe("curators", handler=send_to_socket)

            # Decorator usage
            @event_bus.subscribe("curators")
            async def audit(event):
                pass
        """
        if handler is None:
            # Decorator mode
            def decorator(func: Callable):
                self._add_subscriber(channel, func, priority, name)
                return func
            return decorator

        self._add_subscriber(channel, handler, priority, name)

        def unsubscribe():
            self.unsubscribe(channel, handler)
        return unsubscribe

    def _add_subscriber(
        self,
        channel: Optional[str],
        handler: Callable,
        priority: int,
        name: Optional[str]
    ):
        """Add a subscriber to the appropriate list."""
        event_handler = EventHandler(
            handler=handler,
            priority=priority,
            channel=channel,
            name=name
        )

        if channel:
            self._subscribers[channel].append(event_handler)
            self._subscribers[channel].sort(key=lambda h: h.priority, reverse=True)
        else:
            self._wildcard_subscribers.append(event_handler)
            self._wildcard_subscribers.sort(key=lambda h: h.priority, reverse=True)

        logger.debug(f"Subscribed {event_handler.name} to {channel or 'wildcard'}")

    def unsubscribe(self, channel: Optional[str], handler: Callable):
        """Unsubscribe a handler. Unknown handlers are ignored."""
        if channel:
            self._subscribers[channel] = [
                h for h in self._subscribers[channel]
                if h.handler != handler
            ]
            if not self._subscribers[channel]:
                del self._subscribers[channel]
        else:
            self._wildcard_subscribers = [
                h for h in self._wildcard_subscribers
                if h.handler != handler
            ]

        logger.debug(f"Unsubscribed {getattr(handler, '__name__', handler)} from {channel or 'wildcard'}")

    async def publish(
        self,
        channel: str,
        event: BaseEvent,
        wait_for_handlers: bool = False
    ) -> Optional[List[Any]]:
        """
        Publish an event to all current subscribers of a channel.

        Args:
            channel: Target channel
            event: Event to publish
            wait_for_handlers: If True, wait for all handlers to complete

        Returns:
            List of handler results if wait_for_handlers=True, else None
        """
        self._stats.total_published += 1
        self._stats.last_event_time = datetime.now(timezone.utc)

        # Apply middleware
        for middleware in self._middleware:
            event = await middleware(event)
            if event is None:
                logger.debug("Event cancelled by middleware")
                return None

        # Snapshot: subscribers joining after this point miss the event
        handlers = self._get_handlers_for_channel(channel)

        if not handlers:
            logger.debug(f"No subscribers on {channel} for {event.event_type}")
            return None

        logger.debug(
            f"Publishing {event.event_type} to {len(handlers)} subscribers on {channel}"
        )

        if wait_for_handlers:
            return await self._execute_handlers_sync(channel, event, handlers)

        # Fire and forget
        task = asyncio.create_task(self._execute_handlers_async(channel, event, handlers))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return None

    def _get_handlers_for_channel(self, channel: str) -> List[EventHandler]:
        """Get all subscribers for a channel."""
        handlers = list(self._subscribers.get(channel, []))
        handlers.extend(self._wildcard_subscribers)
        handlers.sort(key=lambda h: h.priority, reverse=True)
        return handlers

    async def _execute_handlers_sync(
        self,
        channel: str,
        event: BaseEvent,
        handlers: List[EventHandler]
    ) -> List[Any]:
        """Execute handlers one by one and collect results."""
        results = []
        for handler in handlers:
            results.append(await self._execute_single_handler(channel, event, handler))
        return results

    async def _execute_handlers_async(
        self,
        channel: str,
        event: BaseEvent,
        handlers: List[EventHandler]
    ):
        """Execute handlers concurrently (fire and forget)."""
        tasks = [
            asyncio.create_task(self._execute_single_handler(channel, event, handler))
            for handler in handlers
        ]
        await asyncio.gather(*tasks, return_exceptions=True)

    async def _execute_single_handler(
        self,
        channel: str,
        event: BaseEvent,
        handler: EventHandler
    ) -> Any:
        """Execute a single handler with error handling."""
        try:
            result = handler.handler(event)
            if inspect.isawaitable(result):
                result = await result
            self._stats.successful_handlers += 1
            return result
        except Exception as e:
            logger.error(
                f"Error delivering {event.event_type} to {handler.name} "
                f"on {channel}: {e}",
                exc_info=True
            )
            self._stats.failed_handlers += 1
            return None

    def add_middleware(self, middleware: Callable):
        """
        Add middleware for event processing.

        Middleware is an async function that takes an event and returns
        an event (possibly modified) or None to cancel delivery.
        """
        self._middleware.append(middleware)
        logger.debug(f"Added middleware: {middleware.__name__}")

    def subscriber_count(self, channel: str) -> int:
        """Number of channel-specific subscribers."""
        return len(self._subscribers.get(channel, []))

    def get_stats(self) -> EventBusStats:
        """Get event bus statistics."""
        return self._stats

    async def drain(self):
        """Wait for fire-and-forget deliveries still in flight."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def clear(self):
        """Clear all subscriptions (for testing)."""
        await self.drain()
        self._subscribers.clear()
        self._wildcard_subscribers.clear()
        self._middleware.clear()
        logger.debug("Event bus cleared")
