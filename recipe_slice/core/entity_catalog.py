"""
Entity Catalog
==============

The permanent master set of spawnable fruit kinds plus a runtime weight
overlay that steers the spawner.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from recipe_slice.core.config_loader import GameConfig, KindConfig, get_config

logger = logging.getLogger(__name__)

# Kinds are identified by their configured name
EntityKind = str


@dataclass(frozen=True)
class WeightedEntry:
    """A kind together with its current selection weight."""
    kind: EntityKind
    weight: float


class EntityCatalog:
    """
    Collection of all fruit kinds and their current selection weights.

    The master list never changes after construction. The weight overlay and
    the optional hard filter are mutated by a single owner (the director, or
    a legacy caller through the spawner); no locking is done.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        kinds: Optional[Sequence[KindConfig]] = None
    ):
        """
        Initialize catalog from game config.

        Args:
            config: GameConfig instance. If None, loads from default location.
            kinds: Explicit kind list overriding the configured one.
        """
        if kinds is None:
            if config is None:
                config = get_config()
            kinds = config.kinds

        self._kinds: Tuple[KindConfig, ...] = tuple(kinds)
        self._by_name: Dict[EntityKind, KindConfig] = {k.name: k for k in self._kinds}
        self._weights: Dict[EntityKind, float] = {k.name: k.weight for k in self._kinds}
        self._allowed: Optional[Set[EntityKind]] = None

        if not self._kinds:
            logger.warning("Entity catalog is empty; nothing can be spawned")

    def __len__(self) -> int:
        return len(self._kinds)

    def __iter__(self):
        return iter(self.all_kinds())

    def __contains__(self, kind: object) -> bool:
        return kind in self._by_name

    def all_kinds(self) -> Tuple[EntityKind, ...]:
        """All kinds of the master set, in configured order."""
        return tuple(k.name for k in self._kinds)

    def get(self, kind: EntityKind) -> KindConfig:
        """Get the configuration of a kind."""
        return self._by_name[kind]

    def design_weight(self, kind: EntityKind) -> float:
        """Weight the kind was configured with."""
        return self._by_name[kind].weight

    def weight_of(self, kind: EntityKind) -> float:
        """Current weight of a kind."""
        return self._weights[kind]

    @property
    def weights(self) -> Dict[EntityKind, float]:
        """Copy of the current weight overlay."""
        return dict(self._weights)

    @property
    def allowed_kinds(self) -> Optional[Set[EntityKind]]:
        """Active hard filter, or None when every kind is eligible."""
        return None if self._allowed is None else set(self._allowed)

    def set_weight(self, kind: EntityKind, value: float) -> None:
        """
        Set the selection weight of one kind.

        A weight of 0 excludes the kind from selection without removing it.

        Raises:
            KeyError: If kind is not in the catalog.
            ValueError: If value is negative.
        """
        if kind not in self._by_name:
            raise KeyError(f"Unknown kind: {kind}")
        if value < 0:
            raise ValueError(f"Weight must be >= 0, got {value} for {kind}")
        self._weights[kind] = float(value)

    def reset_weights(self, baseline: Optional[float] = None) -> None:
        """
        Reset every weight.

        Args:
            baseline: Uniform weight for all kinds. If None, restores each
                kind's design weight.
        """
        if baseline is not None and baseline < 0:
            raise ValueError(f"Baseline weight must be >= 0, got {baseline}")
        for kind in self._kinds:
            self._weights[kind.name] = kind.weight if baseline is None else float(baseline)

    def restrict_to(self, kinds: Iterable[EntityKind]) -> None:
        """
        Narrow selection to a subset of kinds.

        Unknown names are ignored, matching how the name filter has always
        behaved. An empty result leaves nothing eligible.
        """
        self._allowed = {k for k in kinds if k in self._by_name}

    def clear_restriction(self) -> None:
        """Make every kind eligible again."""
        self._allowed = None

    def eligible_entries(self) -> List[WeightedEntry]:
        """Weighted entries selection draws from, in catalog order."""
        return [
            WeightedEntry(k.name, self._weights[k.name])
            for k in self._kinds
            if self._allowed is None or k.name in self._allowed
        ]
