"""Tiered decision engine.

A decision starts from the legal moves around the agent, drops the immediate
reversal when anything else is available, and then walks the tiers from high
to low priority. In each tier one applicable block is drawn by weight and
allowed to narrow the candidates; the first tier that leaves a single move
decides. Survivors of all tiers are split by a uniform random pick.

Randomness comes from an injected ``random.Random`` so runs can be replayed.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .blocks import DecisionContext, RuleBlock, Thought, apply_block, is_applicable
from .moves import Move, exclude_reversal, legal_moves
from .tiers import Priority, TierConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Decision:
    move: Optional[Move]
    thoughts: Tuple[Thought, ...] = ()

    @property
    def stuck(self) -> bool:
        return self.move is None

    @property
    def deliberated(self) -> bool:
        """Whether the move came out of a real choice rather than a corridor."""
        return bool(self.thoughts)

    @property
    def annotation(self) -> Optional[str]:
        if not self.thoughts:
            return None
        return "".join(t.value for t in self.thoughts)


def choose_block(blocks: Sequence[RuleBlock], rng: random.Random) -> Optional[RuleBlock]:
    """Weighted draw; a block's weight is its unnormalised share of the tier."""
    candidates = [b for b in blocks if b.weight > 0]
    if not candidates:
        return None
    remaining = rng.random() * sum(b.weight for b in candidates)
    for block in candidates:
        remaining -= block.weight
        if remaining <= 0:
            return block
    # float rounding can leave a sliver after the last subtraction
    return candidates[-1]


def summarize_thoughts(thoughts: Sequence[Thought]) -> Tuple[Thought, ...]:
    """Drop the dice once any real heuristic contributed."""
    if not thoughts:
        return (Thought.DICE,)
    substantive = tuple(t for t in thoughts if t != Thought.DICE)
    return substantive if substantive else (Thought.DICE,)


class DecisionEngine:
    def __init__(self, tiers: TierConfig | None = None, rng: random.Random | None = None) -> None:
        self.tiers = tiers or TierConfig()
        self._rng = rng or random.Random()

    def candidate_moves(self, ctx: DecisionContext) -> List[Move]:
        return exclude_reversal(legal_moves(ctx.position, ctx.grid), ctx.last_direction)

    def decide_next_move(self, ctx: DecisionContext) -> Decision:
        moves = self.candidate_moves(ctx)
        if not moves:
            return Decision(move=None)
        if len(moves) == 1:
            return Decision(move=moves[0])

        thoughts: List[Thought] = []
        for priority, tier in zip(Priority, self.tiers):
            applicable = [b for b in tier if b.weight > 0 and is_applicable(b, ctx, moves)]
            block = choose_block(applicable, self._rng)
            if block is None:
                continue

            moves, thought = apply_block(block, ctx, moves)
            thoughts.append(thought)
            logger.debug("%s tier drew %r, %d candidate(s) left", priority.label, block, len(moves))
            if len(moves) == 1:
                return Decision(move=moves[0], thoughts=summarize_thoughts(thoughts))

        return Decision(move=self._rng.choice(moves), thoughts=summarize_thoughts(thoughts))
