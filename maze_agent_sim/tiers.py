"""Tier configurations: the personality an agent is spawned with.

On the wire a configuration is a plain JSON value, three ordered lists (high,
medium, low priority) of ``{"kind": ..., "weight": ..., "mode": ...}`` objects::

    [[{"kind": "wallFollowing", "weight": 3, "mode": "left"}],
     [{"kind": "backtracking", "weight": 1, "mode": "avoid"}],
     []]

Each tier may also be written as ``{"blocks": [...]}`` and a block may use
``type`` instead of ``kind``. The legacy ``rightWall`` kind reads as a right-hand
wall follower; kinds this version does not know load as inert blocks.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass, field, replace
from enum import IntEnum
from typing import Any, Dict, Iterator, List, Sequence, Tuple

from .blocks import (
    BacktrackMode,
    Backtracking,
    CheckMap,
    LineOfSight,
    RandomGuesser,
    RuleBlock,
    Social,
    SocialMode,
    TowardExit,
    UnknownBlock,
    WallFollowing,
    WallSide,
)
from .schema import TIER_CONFIG_SCHEMA, validate_or_raise


class Priority(IntEnum):
    HIGH = 0
    MEDIUM = 1
    LOW = 2

    @property
    def label(self) -> str:
        return ("High", "Med", "Low")[self]


TIER_COUNT = len(Priority)

Tier = Tuple[RuleBlock, ...]


@dataclass(frozen=True)
class TierConfig:
    tiers: Tuple[Tier, ...] = ((), (), ())

    def __post_init__(self) -> None:
        if len(self.tiers) != TIER_COUNT:
            raise ValueError(f"Tier configuration needs exactly {TIER_COUNT} tiers, got {len(self.tiers)}.")
        object.__setattr__(self, "tiers", tuple(tuple(t) for t in self.tiers))

    @staticmethod
    def of(
        high: Sequence[RuleBlock] = (),
        medium: Sequence[RuleBlock] = (),
        low: Sequence[RuleBlock] = (),
    ) -> "TierConfig":
        return TierConfig(tiers=(tuple(high), tuple(medium), tuple(low)))

    def __iter__(self) -> Iterator[Tier]:
        return iter(self.tiers)

    def tier(self, priority: Priority) -> Tier:
        return self.tiers[priority]

    def is_empty(self) -> bool:
        return not any(self.tiers)

    def to_document(self) -> List[List[Dict[str, Any]]]:
        return [[block_to_dict(b) for b in tier] for tier in self.tiers]

    @staticmethod
    def from_document(doc: Any) -> "TierConfig":
        validate_or_raise(doc, TIER_CONFIG_SCHEMA)
        tiers = []
        for entry in doc:
            blocks = entry["blocks"] if isinstance(entry, dict) else entry
            tiers.append(tuple(block_from_dict(b) for b in blocks))
        return TierConfig(tiers=tuple(tiers))

    def dumps(self) -> str:
        return _canonical(self.to_document())

    @staticmethod
    def loads(text: str) -> "TierConfig":
        try:
            doc = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Tier configuration is not valid JSON: {exc}") from exc
        return TierConfig.from_document(doc)

    def fingerprint(self) -> str:
        """sha256 of the canonical document; equal configurations hash equally."""
        return hashlib.sha256(self.dumps().encode("utf-8")).hexdigest()


def _canonical(doc: Any) -> str:
    return json.dumps(doc, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def block_to_dict(block: RuleBlock) -> Dict[str, Any]:
    match block:
        case WallFollowing(weight=w, mode=mode):
            return {"kind": "wallFollowing", "weight": w, "mode": mode.value}
        case LineOfSight(weight=w):
            return {"kind": "lineOfSight", "weight": w}
        case TowardExit(weight=w):
            return {"kind": "towardExit", "weight": w}
        case CheckMap(weight=w):
            return {"kind": "checkMap", "weight": w}
        case Backtracking(weight=w, mode=mode):
            return {"kind": "backtracking", "weight": w, "mode": mode.value}
        case Social(weight=w, mode=mode):
            return {"kind": "social", "weight": w, "mode": mode.value}
        case RandomGuesser(weight=w):
            return {"kind": "randomGuesser", "weight": w}
        case UnknownBlock(kind=kind, weight=w):
            return {"kind": kind, "weight": w}
    raise TypeError(f"Not a rule block: {block!r}")


def block_from_dict(data: Dict[str, Any]) -> RuleBlock:
    kind = data.get("kind") or data.get("type")
    weight = data.get("weight", 1)
    mode = data.get("mode")
    try:
        match kind:
            case "wallFollowing":
                return WallFollowing(weight=weight, mode=WallSide(mode or WallSide.RIGHT))
            case "rightWall":
                return WallFollowing(weight=weight, mode=WallSide.RIGHT)
            case "lineOfSight":
                return LineOfSight(weight=weight)
            case "towardExit":
                return TowardExit(weight=weight)
            case "checkMap":
                return CheckMap(weight=weight)
            case "backtracking":
                return Backtracking(weight=weight, mode=BacktrackMode(mode or BacktrackMode.AVOID))
            case "social":
                return Social(weight=weight, mode=SocialMode(mode or SocialMode.FOLLOW))
            case "randomGuesser":
                return RandomGuesser(weight=weight)
    except ValueError as exc:
        raise ValueError(f"Unsupported mode {mode!r} for {kind} block.") from exc
    return UnknownBlock(kind=str(kind), weight=weight)


def block_label(block: RuleBlock) -> str:
    match block:
        case WallFollowing(mode=WallSide.LEFT):
            return "Left Wall"
        case WallFollowing():
            return "Right Wall"
        case LineOfSight():
            return "Line of Sight"
        case TowardExit():
            return "Toward Exit"
        case CheckMap():
            return "Check Map"
        case Backtracking(mode=BacktrackMode.SEEK):
            return "Seek Backtracking"
        case Backtracking():
            return "Avoid Backtracking"
        case Social(mode=SocialMode.FOLLOW):
            return "Follow Others"
        case Social():
            return "Avoid Others"
        case RandomGuesser():
            return "Random Guesser"
        case UnknownBlock(kind=kind):
            return f"Unknown ({kind})"
    return repr(block)


def describe_tiers(config: TierConfig) -> List[str]:
    """Human-readable lines listing each tier's blocks with their share of the tier weight."""
    lines = []
    for priority, tier in zip(Priority, config):
        if not tier:
            continue
        lines.append(f"{priority.label} Priority:")
        total = sum(b.weight for b in tier)
        for block in tier:
            percent = round(block.weight / total * 100) if total > 0 else 0
            lines.append(f"  {block_label(block)} ({percent}%)")
    return lines


@dataclass
class TierDraft:
    """Mutable per-tier block lists edited before an agent is spawned."""

    tiers: List[List[RuleBlock]] = field(default_factory=lambda: [[] for _ in range(TIER_COUNT)])

    def add(self, priority: Priority, block: RuleBlock) -> None:
        self.tiers[priority].append(block)

    def remove(self, priority: Priority, index: int) -> RuleBlock:
        return self.tiers[priority].pop(index)

    def move(self, priority: Priority, index: int, target: Priority, target_index: int | None = None) -> None:
        """Reorder within a tier, or hand a block to another tier at weight 1."""
        block = self.tiers[priority].pop(index)
        if target != priority:
            block = replace(block, weight=1.0)
        dest = self.tiers[target]
        dest.insert(len(dest) if target_index is None else target_index, block)

    def set_weight(self, priority: Priority, index: int, weight: float) -> None:
        block = self.tiers[priority][index]
        self.tiers[priority][index] = replace(block, weight=weight)

    def freeze(self) -> TierConfig:
        return TierConfig(tiers=tuple(tuple(t) for t in self.tiers))

    def clear(self) -> None:
        self.tiers = [[] for _ in range(TIER_COUNT)]
