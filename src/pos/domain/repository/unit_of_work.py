"""Abstract unit of work: the explicit atomic scope.

A unit of work bundles the repositories that must change together and
owns the transaction they share.  Usage::

    with uow:
        uow.products.adjust_stock(...)
        uow.sales.add(sale)
        uow.commit()

Leaving the ``with`` block without ``commit()``, normally or through an
exception, rolls everything back, so no partial state is ever visible.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from pos.domain.repository.product_repository import ProductRepository
from pos.domain.repository.sale_repository import SaleRepository
from pos.domain.repository.sequence_generator import SequenceGenerator


class UnitOfWork(ABC):

    products: ProductRepository
    sales: SaleRepository
    sequences: SequenceGenerator

    def __enter__(self) -> UnitOfWork:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        # rollback after a successful commit is a no-op
        self.rollback()

    @abstractmethod
    def commit(self) -> None:
        """Make every change in this scope visible atomically."""

    @abstractmethod
    def rollback(self) -> None:
        """Discard every uncommitted change in this scope."""
