"""
Application Queries

Query objects and handlers for read operations.
Queries never create or modify a session.
"""

from discord_jukebox.application.queries.get_queue import GetQueueQuery, QueueInfo

__all__ = [
    "GetQueueQuery",
    "QueueInfo",
]
