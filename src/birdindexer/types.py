"""
Result types for entity lookups.

A lookup either finds the entity, or reports that the event referencing it should be skipped. Hard
failures are never represented here: they are raised as exceptions.
"""

from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class Found[T]:
    entity: T


@dataclass(slots=True, frozen=True)
class Skip:
    reason: str


type Lookup[T] = Found[T] | Skip
