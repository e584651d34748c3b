# slotwise/services/availability_rules.py
from __future__ import annotations

import logging

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from slotwise.core.timeutils import get_zone
from slotwise.models.availability_rule import AvailabilityRule
from slotwise.schemas.availability import AvailabilityRuleIn

logger = logging.getLogger(__name__)


async def list_rules(db: AsyncSession, user_id: int) -> list[AvailabilityRule]:
    result = await db.execute(
        select(AvailabilityRule)
        .where(AvailabilityRule.user_id == user_id)
        .order_by(AvailabilityRule.day_of_week.asc(), AvailabilityRule.start_time.asc())
    )
    return list(result.scalars().all())


async def replace_rules(
    db: AsyncSession,
    user_id: int,
    rules: list[AvailabilityRuleIn],
) -> list[AvailabilityRule]:
    """
    Replace the host's whole weekly schedule.

    The delete and the inserts share one transaction, so concurrent readers
    see either the old set or the new one, never an empty schedule.
    """
    for rule in rules:
        get_zone(rule.timezone)

    await db.execute(delete(AvailabilityRule).where(AvailabilityRule.user_id == user_id))
    db.add_all(
        [
            AvailabilityRule(
                user_id=user_id,
                day_of_week=rule.day_of_week,
                start_time=rule.start_time,
                end_time=rule.end_time,
                timezone=rule.timezone,
            )
            for rule in rules
        ]
    )
    await db.commit()

    logger.info("Replaced availability for user_id=%s with %d rule(s)", user_id, len(rules))
    return await list_rules(db, user_id)
