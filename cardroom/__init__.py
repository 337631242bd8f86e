"""
Cardroom - Multiplayer Card Game Server

An in-memory engine for hosting many concurrent card games. It provides:
- Card, deck and discard pile models (standard, Spanish 21 and glitch decks)
- A game aggregate with players, dealer and turn cursor
- Rule engines for Blackjack, Glitchjack and Cribbage
- A thread-safe game registry with age-based cleanup
- A FastAPI adapter exposing the engine over JSON
"""

__version__ = "0.1.0"
