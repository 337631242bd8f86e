"""
Session Module - Keeps track of live games.

Games are EPHEMERAL:
- Held in memory only, never persisted
- Removed explicitly or swept once idle for too long

The registry is the one shared structure; request handlers reach every
game through it.
"""

from .registry import GameRegistry, GameSweeper
from .locks import ReadWriteLock

__all__ = [
    "GameRegistry",
    "GameSweeper",
    "ReadWriteLock",
]
