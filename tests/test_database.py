"""Tests for the unit of work."""

import pytest
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from bittermelon.database import in_unit_of_work, unit_of_work
from bittermelon.models import Outlet


def outlet_count(db: Session) -> int:
    return db.execute(select(func.count(Outlet.id))).scalar_one()


class TestUnitOfWork:
    """Tests for unit_of_work"""

    def test_commits_on_success(self, db_session: Session):
        with unit_of_work(db_session):
            db_session.add(Outlet(name="Daily Planet"))

        db_session.rollback()
        assert outlet_count(db_session) == 1

    def test_rolls_back_on_error(self, db_session: Session):
        with pytest.raises(RuntimeError):
            with unit_of_work(db_session):
                db_session.add(Outlet(name="Daily Planet"))
                db_session.flush()
                raise RuntimeError("boom")

        assert outlet_count(db_session) == 0
        assert not in_unit_of_work(db_session)

    def test_nested_joins_outer(self, db_session: Session):
        """An inner block neither commits nor opens a second stack."""
        with pytest.raises(RuntimeError):
            with unit_of_work(db_session) as outer:
                with unit_of_work(db_session) as inner:
                    assert inner is outer
                    db_session.add(Outlet(name="Daily Planet"))
                assert in_unit_of_work(db_session)
                raise RuntimeError("boom")

        assert outlet_count(db_session) == 0

    def test_callbacks_run_after_commit(self, db_session: Session):
        """Contexts entered on the stack exit once the transaction is over."""
        events = []

        with unit_of_work(db_session) as uow:
            uow.callback(lambda: events.append(in_unit_of_work(db_session)))
            db_session.add(Outlet(name="Daily Planet"))

        assert events == [False]
