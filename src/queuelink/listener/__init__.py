"""
Package: listener
Description: Long-poll listeners for one or several queues.
"""
