"""
Registries of global and per-player data, and the calculator registry.

Classes and Features:
    - ManagedData (Protocol): What a managed object must provide: a manager hook
      and tagged (de)serialization.
    - DataManager: Holds one global data object and one data object per player id,
      tracks whether anything changed since the last save, and converts the whole
      registry to and from a tagged dict.
    - CalculatorsManager: The `DataManager` of `Calculator` instances.

Usage:
    The host creates one manager per session (or loads it from saved data), hands
    the relevant calculator to whatever processes user input, and calls `save()`
    when `dirty` is set.

Example:
    >>> manager = CalculatorsManager()
    >>> manager.get_or_create_player_data("alice").evaluate("x = 2").status
    'x = 2.0'
    >>> manager.dirty
    True
"""

from __future__ import annotations

import logging
from typing import Any, Generic, Protocol, TypeVar

from buildcalc.calc_calculator import Calculator
from buildcalc.calc_constants import (
    GLOBAL_DATA_KEY,
    PLAYER_DATA_KEY,
    PLAYERS_DATA_KEY,
    UUID_KEY,
)

logger = logging.getLogger(__name__)


class ManagedData(Protocol):  # pragma: no cover
    """Protocol for objects stored in a `DataManager`."""

    def set_manager(self, manager: DataManager[Any]) -> None: ...

    def to_tag(self) -> dict[str, Any]: ...

    def read_from_tag(self, tag: dict[str, Any]) -> None: ...


T = TypeVar("T", bound=ManagedData)


class DataManager(Generic[T]):
    """Manages a global data object and per-player data objects.

    Attributes:
        dirty (bool): True when data changed since the last `save()` or `load()`.
    """

    def __init__(self) -> None:
        self.dirty = False
        self.global_data: T = self._attach(self.default_data())
        self.player_data: dict[str, T] = {}

    def default_data(self) -> T:
        """Returns a fresh data object; subclasses decide the type."""
        raise NotImplementedError

    def _attach(self, data: T) -> T:
        data.set_manager(self)
        return data

    def mark_dirty(self) -> None:
        self.dirty = True

    def get_global_data(self) -> T:
        return self.global_data

    def get_or_create_player_data(self, player_id: str) -> T:
        """Returns the data object of `player_id`, creating it on first access."""
        if player_id not in self.player_data:
            logger.debug("Creating data for player %s", player_id)
            self.player_data[player_id] = self._attach(self.default_data())
            self.mark_dirty()
        return self.player_data[player_id]

    def save(self) -> dict[str, Any]:
        """Serializes every managed object and clears the dirty flag."""
        tag = {
            GLOBAL_DATA_KEY: self.global_data.to_tag(),
            PLAYERS_DATA_KEY: [
                {UUID_KEY: player_id, PLAYER_DATA_KEY: data.to_tag()}
                for player_id, data in sorted(self.player_data.items())
            ],
        }
        self.dirty = False
        logger.debug("Saved global data and %d player(s)", len(self.player_data))
        return tag

    def load(self, tag: dict[str, Any]) -> None:
        """Replaces all managed objects with the ones described by `tag`.

        Raises:
            KeyError, ValueError: If `tag` is malformed; the manager is left unchanged.
        """
        global_data = self.default_data()
        global_data.read_from_tag(tag.get(GLOBAL_DATA_KEY, {}))
        player_data: dict[str, T] = {}
        for item in tag.get(PLAYERS_DATA_KEY, []):
            data = self.default_data()
            data.read_from_tag(item[PLAYER_DATA_KEY])
            player_data[str(item[UUID_KEY])] = data

        self.global_data = self._attach(global_data)
        self.player_data = {pid: self._attach(d) for pid, d in player_data.items()}
        self.dirty = False
        logger.debug("Loaded global data and %d player(s)", len(self.player_data))


class CalculatorsManager(DataManager[Calculator]):
    """Manager for the global calculator and the per-player calculators."""

    DATA_NAME = "calculators"

    def __init__(self, **calculator_options: int) -> None:
        self.calculator_options = calculator_options
        super().__init__()

    def default_data(self) -> Calculator:
        return Calculator(**self.calculator_options)

    @classmethod
    def from_tag(cls, tag: dict[str, Any], **calculator_options: int) -> CalculatorsManager:
        manager = cls(**calculator_options)
        manager.load(tag)
        return manager
