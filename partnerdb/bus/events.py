"""
Event Bus - Decoupled Module Communication
Stores emit events, other modules listen. No direct imports between modules.
"""

from typing import Callable, Dict, List, Any
import logging

logger = logging.getLogger(__name__)


class EventBus:
    """
    Simple event bus for decoupled module communication.
    Stores emit events, other modules register handlers to listen.
    """

    def __init__(self):
        self._handlers: Dict[str, List[Callable]] = {}

    def on(self, event_name: str, handler: Callable):
        """
        Register a handler for an event. Registering the same handler
        for the same event again is a no-op.

        Args:
            event_name: Name of the event to listen for
            handler: Callable that receives (event_name, event_data)
        """
        handlers = self._handlers.setdefault(event_name, [])
        if handler in handlers:
            return
        handlers.append(handler)
        logger.debug(f"Registered handler for event '{event_name}': {handler.__name__}")

    def on_all(self, event_names: List[str], handler: Callable):
        """Register one handler for several events."""
        for event_name in event_names:
            self.on(event_name, handler)

    def emit(self, event_name: str, event_data: Dict[str, Any] = None):
        """
        Emit an event to all registered handlers.
        A failing handler is logged and never breaks the emitting operation.

        Args:
            event_name: Name of the event
            event_data: Optional dict of data to pass to handlers
        """
        if event_data is None:
            event_data = {}

        logger.debug(f"Emitting event '{event_name}' with keys: {sorted(event_data)}")

        for handler in self._handlers.get(event_name, []):
            try:
                handler(event_name, event_data)
            except Exception as e:
                logger.error(f"Error in handler {handler.__name__} for event '{event_name}': {e}")

    def clear(self):
        """Clear all handlers (useful for testing)."""
        self._handlers.clear()


# Singleton instance
bus = EventBus()


# =============================================================================
# STANDARD EVENTS
# =============================================================================

# Contact Store
EVENT_CONTACT_CREATED = 'contact_created'
EVENT_CONTACT_UPDATED = 'contact_updated'
EVENT_CONTACT_DELETED = 'contact_deleted'

# Settings Store / Rename Propagator
EVENT_VOCABULARY_ADDED = 'vocabulary_added'
EVENT_VOCABULARY_RENAMED = 'vocabulary_renamed'

# Labor Claims
EVENT_LABOR_CLAIM_CREATED = 'labor_claim_created'
EVENT_LABOR_CLAIM_UPDATED = 'labor_claim_updated'
EVENT_LABOR_CLAIM_DELETED = 'labor_claim_deleted'

# File Store
EVENT_FILE_UPLOADED = 'file_uploaded'
EVENT_FILE_DELETED = 'file_deleted'

# Auth Gate
EVENT_USER_LOGGED_IN = 'user_logged_in'
EVENT_USER_CHANGED = 'user_changed'

ALL_EVENTS = [
    EVENT_CONTACT_CREATED, EVENT_CONTACT_UPDATED, EVENT_CONTACT_DELETED,
    EVENT_VOCABULARY_ADDED, EVENT_VOCABULARY_RENAMED,
    EVENT_LABOR_CLAIM_CREATED, EVENT_LABOR_CLAIM_UPDATED, EVENT_LABOR_CLAIM_DELETED,
    EVENT_FILE_UPLOADED, EVENT_FILE_DELETED,
    EVENT_USER_LOGGED_IN, EVENT_USER_CHANGED,
]
