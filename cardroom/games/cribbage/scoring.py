"""
Cribbage scoring - The show and the pegging count.

Show (hand or crib plus starter):
- Fifteens: 2 per combination of cards totalling 15
- Pairs: 2 per pair of equal ranks
- Runs: 1 per card in the longest run, once per distinct run
- Flush: 4 for a four-card hand flush, 5 if the starter matches;
  a crib only scores the five-card flush
- Nobs: 1 for the Jack of the starter's suit

Pegging (after each card laid):
- 2 for reaching 15, 2 for reaching 31
- 2/6/12 for a pair/three/four of a kind at the end of the count
- 1 per card for a run at the end of the count
"""

from __future__ import annotations
from collections import Counter
from itertools import combinations
from math import prod
from typing import Sequence

from ...engine_core.cards import Card, Rank


def score_fifteens(cards: Sequence[Card]) -> int:
    count = 0
    for size in range(2, len(cards) + 1):
        for combo in combinations(cards, size):
            if sum(c.cribbage_value for c in combo) == 15:
                count += 1
    return count * 2


def score_pairs(cards: Sequence[Card]) -> int:
    counts = Counter(c.rank for c in cards)
    # n of a kind makes n(n-1)/2 pairs at 2 points each
    return sum(n * (n - 1) for n in counts.values())


def score_runs(cards: Sequence[Card]) -> int:
    """Score the longest run(s), counting duplicates as separate runs."""
    counts = Counter(int(c.rank) for c in cards)
    ranks = sorted(counts)
    score = 0

    start = 0
    while start < len(ranks):
        end = start
        while end + 1 < len(ranks) and ranks[end + 1] == ranks[end] + 1:
            end += 1
        length = end - start + 1
        if length >= 3:
            score += length * prod(counts[r] for r in ranks[start:end + 1])
        start = end + 1

    return score


def score_flush(hand: Sequence[Card], starter: Card | None, is_crib: bool = False) -> int:
    if len(hand) < 4:
        return 0
    suit = hand[0].suit
    if any(c.suit != suit for c in hand):
        return 0
    starter_matches = starter is not None and starter.suit == suit
    if starter_matches:
        return len(hand) + 1
    if is_crib:
        return 0
    return len(hand)


def score_nobs(hand: Sequence[Card], starter: Card | None) -> int:
    if starter is None:
        return 0
    for card in hand:
        if card.rank == Rank.JACK and card.suit == starter.suit:
            return 1
    return 0


def score_breakdown(
    hand: Sequence[Card],
    starter: Card | None,
    is_crib: bool = False,
) -> dict[str, int]:
    """Score a hand (or crib) with the starter, by category."""
    cards = list(hand)
    if starter is not None:
        cards.append(starter)

    breakdown = {
        "fifteens": score_fifteens(cards),
        "pairs": score_pairs(cards),
        "runs": score_runs(cards),
        "flush": score_flush(hand, starter, is_crib),
        "nobs": score_nobs(hand, starter),
    }
    breakdown["total"] = sum(breakdown.values())
    return breakdown


def score_hand(hand: Sequence[Card], starter: Card | None, is_crib: bool = False) -> int:
    if not hand:
        return 0
    return score_breakdown(hand, starter, is_crib)["total"]


def score_pegging(played_cards: Sequence[Card], play_total: int) -> int:
    """Points for the card just laid (the last one in `played_cards`)."""
    if not played_cards:
        return 0

    points = 0
    if play_total == 15:
        points += 2
    if play_total == 31:
        points += 2

    last_rank = played_cards[-1].rank
    same = 0
    for card in reversed(played_cards):
        if card.rank != last_rank:
            break
        same += 1
    if same >= 2:
        points += same * (same - 1)

    points += _pegging_run(played_cards)
    return points


def _pegging_run(played_cards: Sequence[Card]) -> int:
    """Length of the longest run formed by the most recent cards, if 3 or more."""
    for length in range(len(played_cards), 2, -1):
        ranks = [int(c.rank) for c in played_cards[-length:]]
        if len(set(ranks)) == length and max(ranks) - min(ranks) == length - 1:
            return length
    return 0
