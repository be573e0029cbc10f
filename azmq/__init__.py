"""Asynchronous ZeroMQ building blocks: messages, ZMTP framing, mailboxes and contexts."""

__version__ = "0.1.0"