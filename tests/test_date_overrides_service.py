# tests/test_date_overrides_service.py
from datetime import date, time

import pytest

from slotwise.core.exceptions import SchedulingValidationError
from slotwise.models.date_override import DateOverride
from slotwise.schemas.date_override import DateOverrideUpdate
from slotwise.services import date_overrides


async def _blocked_day(db, host_id: int) -> DateOverride:
    override = DateOverride(user_id=host_id, date=date(2025, 6, 2), is_available=False)
    db.add(override)
    await db.commit()
    return override


@pytest.mark.asyncio
async def test_rejected_update_leaves_override_untouched(db, seeded):
    override = await _blocked_day(db, seeded.host_id)

    with pytest.raises(SchedulingValidationError):
        await date_overrides.update_override(
            db,
            seeded.host_id,
            override.id,
            DateOverrideUpdate(is_available=True, start_time=time(11, 0)),
        )

    assert not db.dirty
    assert override.is_available is False
    assert override.start_time is None


@pytest.mark.asyncio
async def test_update_merges_with_stored_hours(db, seeded):
    override = await _blocked_day(db, seeded.host_id)
    await date_overrides.update_override(
        db,
        seeded.host_id,
        override.id,
        DateOverrideUpdate(is_available=True, start_time=time(9, 0), end_time=time(10, 0)),
    )

    with pytest.raises(SchedulingValidationError):
        await date_overrides.update_override(
            db, seeded.host_id, override.id, DateOverrideUpdate(start_time=time(10, 30))
        )

    updated = await date_overrides.update_override(
        db, seeded.host_id, override.id, DateOverrideUpdate(end_time=time(12, 0))
    )
    assert updated.is_available is True
    assert (updated.start_time, updated.end_time) == (time(9, 0), time(12, 0))
