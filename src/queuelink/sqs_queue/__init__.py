"""
Package: sqs_queue
Description: Queue and message operations.

Provides the QueueClient for queue lifecycle and message exchange,
and the Queue handle used by listeners.
"""
