"""
Fruit Catalog
=============

Provides convenient access to the fruit and hazard kinds loaded from config.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Optional, Tuple

from fruit_slash.slash_core.config_loader import (
    GameConfig,
    KindConfig,
    get_config
)


@dataclass
class EntityKind:
    """
    Runtime representation of an entity kind.

    Wraps KindConfig with convenience accessors.
    """
    config: KindConfig

    @property
    def id(self) -> int:
        return self.config.id

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def symbol(self) -> str:
        return self.config.symbol

    @property
    def color(self) -> Tuple[int, int, int]:
        return self.config.color

    @property
    def is_hazard(self) -> bool:
        """True if slicing this kind costs a life instead of scoring."""
        return self.config.is_hazard

    def __repr__(self) -> str:
        return f"EntityKind({self.id}: {self.name})"


class FruitCatalog:
    """
    Collection of all entity kinds: the fruit set plus the hazard.

    Fruit kinds are indexed 0..N-1, the hazard has ID N.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize catalog from game config.

        Args:
            config: GameConfig instance. If None, loads from default location.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._fruits: Tuple[EntityKind, ...] = tuple(
            EntityKind(kind_config) for kind_config in config.fruits
        )
        self._hazard = EntityKind(config.hazard)

    def __len__(self) -> int:
        """Total number of kinds, hazard included."""
        return len(self._fruits) + 1

    def __getitem__(self, kind_id: int) -> EntityKind:
        """Get a kind by ID."""
        if 0 <= kind_id < len(self._fruits):
            return self._fruits[kind_id]
        if kind_id == self._hazard.id:
            return self._hazard
        raise IndexError(f"Kind ID {kind_id} out of range [0, {len(self)})")

    def __iter__(self) -> Iterator[EntityKind]:
        """Iterate over all kinds, fruits first."""
        return iter(self._fruits + (self._hazard,))

    @property
    def fruits(self) -> Tuple[EntityKind, ...]:
        """Fruit kinds in ID order."""
        return self._fruits

    @property
    def hazard(self) -> EntityKind:
        """The hazard kind."""
        return self._hazard

    def get_by_name(self, name: str) -> Optional[EntityKind]:
        """Get a kind by name (case-insensitive)."""
        name_lower = name.lower()
        for kind in self:
            if kind.name.lower() == name_lower:
                return kind
        return None


# Module-level singleton
_cached_catalog: Optional[FruitCatalog] = None


def get_catalog(config: Optional[GameConfig] = None) -> FruitCatalog:
    """
    Get the fruit catalog singleton.

    Args:
        config: Optional config to use. If None, uses cached or default config.

    Returns:
        FruitCatalog instance.
    """
    global _cached_catalog
    if _cached_catalog is None or config is not None:
        _cached_catalog = FruitCatalog(config)
    return _cached_catalog
