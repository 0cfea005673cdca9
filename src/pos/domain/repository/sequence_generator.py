"""Abstract source of collision-free sequence values."""

from __future__ import annotations

from abc import ABC, abstractmethod


class SequenceGenerator(ABC):

    @abstractmethod
    def next_value(self, sequence_name: str) -> int:
        """Reserve and return the next value of a named sequence.

        Implementations must use an atomic increment-and-reserve primitive
        (a locked counter or a store-native sequence), never a count or a
        max of existing records.  The reservation belongs to the caller's
        unit of work: values are unique among committed sales, gaps are
        allowed.
        """
