"""Sequence allocation via locked counter rows.

Each named sequence owns one row in ``sequence_counters``.  Incrementing
it with an in-place UPDATE takes the row's write lock until the caller's
transaction ends, so concurrent allocations are serialized and a rolled
back transaction never hands out its value.  Values are never derived
from a count or a max over the sales table.
"""

from __future__ import annotations

import logging

from sqlalchemy import insert, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from pos.domain.exceptions import InconsistentStateError
from pos.domain.repository.sequence_generator import SequenceGenerator
from pos.infrastructure.persistence.orm import SequenceCounterRow

logger = logging.getLogger(__name__)


class SqlSequenceGenerator(SequenceGenerator):

    def __init__(self, session: Session) -> None:
        self._session = session

    def next_value(self, sequence_name: str) -> int:
        if not self._increment(sequence_name):
            # First use of this sequence.  Another transaction may be
            # creating the same counter; the savepoint keeps a losing
            # insert from aborting the caller's transaction.
            try:
                with self._session.begin_nested():
                    self._session.execute(
                        insert(SequenceCounterRow).values(name=sequence_name, current_value=1)
                    )
            except IntegrityError:
                logger.debug("sequence_counter_race_retry", extra={"sequence_name": sequence_name})
                if not self._increment(sequence_name):
                    raise
            else:
                logger.debug("sequence_allocated", extra={"sequence_name": sequence_name, "value": 1})
                return 1

        value = self._session.execute(
            select(SequenceCounterRow.current_value).where(SequenceCounterRow.name == sequence_name)
        ).scalar_one()
        if value <= 0:
            raise InconsistentStateError(
                f"Sequence {sequence_name} produced non-positive value {value}"
            )
        logger.debug("sequence_allocated", extra={"sequence_name": sequence_name, "value": value})
        return value

    def _increment(self, sequence_name: str) -> bool:
        result = self._session.execute(
            update(SequenceCounterRow)
            .where(SequenceCounterRow.name == sequence_name)
            .values(current_value=SequenceCounterRow.current_value + 1)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1
