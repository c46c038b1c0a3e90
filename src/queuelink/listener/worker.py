"""
Module: listener/worker.py
Description: Long-poll listeners that hand queue messages to a handler.

Each listened queue gets one dedicated worker thread that long-polls
the queue and calls the handler synchronously for every message.
stop() is cooperative: the in-flight poll completes, the worker sees
its run marked stopped and exits, so shutdown takes at most one poll interval.

Key Components:
- QueueListener: one queue, one worker thread
- MultiQueueListener: fans listen()/stop() out to one QueueListener per queue

Handler failures: an exception raised by the handler (or by the poll
itself) is logged, stops that queue's listener, and is re-raised in the
worker thread for threading.excepthook. Other queues keep running.
"""

import threading
from typing import Callable, List, Optional

from queuelink.errors import ConfigurationError
from queuelink.models.message import Message
from queuelink.sqs_queue.queue import DEFAULT_POLL_TIME, MAX_POLL_TIME, Queue
from queuelink.utils.logger import get_logger

logger = get_logger(__name__)

MessageHandler = Callable[[Message], None]


class QueueListener:
    """
    Listen for messages on one queue.

    Example:
        >>> listener = QueueListener(queue)
        >>> listener.listen(lambda message: message.delete())
        >>> ...
        >>> listener.stop()
    """

    def __init__(self, queue: Queue, poll_time: Optional[int] = None):
        """
        Args:
            queue: Queue to listen on
            poll_time: Seconds to long-poll per iteration (1..20); defaults
                to the poll time of the queue's client
        """
        if not isinstance(queue, Queue):
            raise ConfigurationError("queue must be a Queue instance")
        if poll_time is None:
            poll_time = DEFAULT_POLL_TIME if queue.client is None else queue.client.poll_time
        if not 1 <= poll_time <= MAX_POLL_TIME:
            raise ConfigurationError(f"poll_time must be between 1 and {MAX_POLL_TIME}")

        self.queue = queue
        self.poll_time = poll_time
        self._lock = threading.Lock()
        # One stop event per run, so a stopped worker never resumes
        self._stopped: Optional[threading.Event] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def listening(self) -> bool:
        stopped = self._stopped
        return stopped is not None and not stopped.is_set()

    def listen(self, handler: MessageHandler) -> None:
        """
        Start listening; returns immediately.

        The handler runs on the listener's worker thread, not on the
        calling thread. Calling listen() while already listening does nothing.
        """
        if not callable(handler):
            raise ConfigurationError("handler must be callable")

        with self._lock:
            if self.listening:
                return
            stopped = threading.Event()
            self._stopped = stopped
            self._thread = threading.Thread(
                target=self._run,
                args=(handler, stopped),
                name=f"queuelink-listener-{self.queue.name}",
                daemon=True,
            )
            self._thread.start()

        logger.info("Listener started", queue=self.queue.name, poll_time=self.poll_time)

    def stop(self) -> None:
        """
        Stop listening and wait for the worker to finish its current poll.

        When called from the handler itself, only the run is marked stopped
        and the worker exits after the handler returns.
        """
        with self._lock:
            if self._stopped is not None:
                self._stopped.set()
            thread = self._thread

        # Joined outside the lock: a handler may call stop() itself
        if thread is not None and thread is not threading.current_thread():
            thread.join()
            with self._lock:
                if self._thread is thread:
                    self._thread = None
        logger.info("Listener stopped", queue=self.queue.name)

    def join(self, timeout: Optional[float] = None) -> None:
        """Wait for the worker thread to exit."""
        with self._lock:
            thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)

    def _run(self, handler: MessageHandler, stopped: threading.Event) -> None:
        try:
            while not stopped.is_set():
                message = self.queue.retrieve(self.poll_time)
                if message is not None:
                    handler(message)
        except Exception:
            logger.exception("Listener worker failed", queue=self.queue.name)
            stopped.set()
            raise


class MultiQueueListener:
    """
    Listen for messages on several queues at the same time.

    Same interface as QueueListener; every queue gets its own worker.
    """

    def __init__(self, *queues: Queue, poll_time: Optional[int] = None):
        if not queues:
            raise ConfigurationError("at least one queue is required")
        if poll_time is not None and not 1 <= poll_time <= MAX_POLL_TIME:
            raise ConfigurationError(f"poll_time must be between 1 and {MAX_POLL_TIME}")
        self.queues = list(queues)
        self.poll_time = poll_time
        self.listeners: List[QueueListener] = []

    @property
    def listening(self) -> bool:
        return any(listener.listening for listener in self.listeners)

    def listen(self, handler: MessageHandler) -> None:
        if self.listeners:
            return
        self.listeners = [QueueListener(queue, self.poll_time) for queue in self.queues]
        for listener in self.listeners:
            listener.listen(handler)

    def stop(self) -> None:
        for listener in self.listeners:
            listener.stop()
        self.listeners = []
