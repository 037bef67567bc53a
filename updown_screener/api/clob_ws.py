"""CLOB WebSocket client for order book snapshots."""
import json
import logging
import threading
from typing import Callable, List, Optional

import websocket

from ..config import WS_PING_INTERVAL, WS_URL
from ..errors import StreamError
from ..screener.models import BookUpdateEvent

logger = logging.getLogger(__name__)

# Called once per event; returning False closes the subscription
EventHandler = Callable[[BookUpdateEvent], bool]


class CLOBWebSocket:
    """
    WebSocket client for the Polymarket CLOB market channel.

    Subscribes to a fixed set of token IDs and feeds every decoded event to
    a single handler. Events are delivered one at a time from the socket's
    thread; the subscription ends the first time the handler returns False,
    when the server closes the connection, or when the timeout expires.

    Example:
        ws = CLOBWebSocket()
        timed_out = ws.stream(["123...", "456..."], handle_event, timeout=60)
    """

    def __init__(self, url: str = WS_URL, ping_interval: float = WS_PING_INTERVAL):
        self.url = url
        self.ping_interval = ping_interval
        self.ws: Optional[websocket.WebSocketApp] = None
        self.subscriptions: List[str] = []
        self.handler: Optional[EventHandler] = None
        self.running = False
        self.events_received = 0
        self._thread: Optional[threading.Thread] = None
        self._opened = False
        self._error: Optional[BaseException] = None

    def subscribe(self, token_ids: List[str]):
        """Add token IDs to subscription list."""
        self.subscriptions.extend(token_ids)

    def subscription_message(self) -> str:
        return json.dumps({"assets_ids": self.subscriptions, "type": "market"})

    def dispatch(self, message: str) -> bool:
        """
        Decode one text frame and hand its events to the handler.

        A frame holds either a single event object or a list of them.

        Returns:
            False once the handler asked to stop, True otherwise
        """
        try:
            data = json.loads(message)
        except json.JSONDecodeError:
            logger.debug(f"Ignoring non-JSON frame: {message[:40]!r}")
            return True

        items = data if isinstance(data, list) else [data]
        for item in items:
            if not isinstance(item, dict):
                continue
            self.events_received += 1
            if not self.handler(BookUpdateEvent.from_message(item)):
                return False
        return True

    def _on_message(self, ws, message):
        """Handle incoming messages."""
        if not self.running:
            return

        try:
            keep_going = self.dispatch(message)
        except Exception as e:
            # Re-raised from stream() on the caller's thread
            self._error = e
            keep_going = False

        if not keep_going:
            self.running = False
            ws.close()

    def _on_error(self, ws, error):
        """Handle errors."""
        logger.error(f"WebSocket error: {error}")
        if not self._opened and self._error is None:
            self._error = StreamError(f"Failed to open {self.url}: {error}")

    def _on_close(self, ws, close_status_code, close_msg):
        """Handle connection close."""
        logger.info(
            f"WebSocket closed: {close_status_code} - {close_msg} "
            f"({self.events_received} events received)"
        )
        self.running = False

    def _on_open(self, ws):
        """Handle connection open."""
        self._opened = True
        logger.info(f"CLOB WebSocket connected, subscribing to {len(self.subscriptions)} tokens")
        ws.send(self.subscription_message())

    def connect(self):
        """Open the connection in a background thread."""
        self.ws = websocket.WebSocketApp(
            self.url,
            on_message=self._on_message,
            on_error=self._on_error,
            on_close=self._on_close,
            on_open=self._on_open,
        )

        self.running = True
        self._thread = threading.Thread(
            target=self.ws.run_forever,
            kwargs={"ping_interval": self.ping_interval},
            daemon=True,
        )
        self._thread.start()

    def disconnect(self):
        """Disconnect WebSocket."""
        self.running = False
        if self.ws:
            self.ws.close()
        if self._thread:
            self._thread.join(timeout=5)

    def stream(
        self,
        token_ids: List[str],
        handler: EventHandler,
        timeout: Optional[float] = None,
    ) -> bool:
        """
        Subscribe and block until the subscription ends.

        Args:
            token_ids: Token IDs to subscribe to
            handler: Per-event callback; return False to stop
            timeout: Seconds to wait before giving up (None = no limit)

        Returns:
            True if the timeout expired before the subscription ended

        Raises:
            StreamError: If the connection fails before it opens
            Exception: Whatever the handler raised, re-raised here
        """
        if not token_ids:
            raise StreamError("No token IDs to subscribe to")

        self.subscribe(token_ids)
        self.handler = handler
        self._error = None
        self._opened = False

        self.connect()

        self._thread.join(timeout=timeout)
        timed_out = self._thread.is_alive()
        if timed_out:
            logger.warning(f"No complete book set after {timeout}s, closing stream")
        self.disconnect()

        if self._error is not None:
            raise self._error
        return timed_out
