from datetime import datetime
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import case, select, update
from sqlalchemy.exc import IntegrityError
import logging

from app.config.config import settings
from app.core.exceptions import ConfigurationError
from app.core.settings import COUNTER_ID, GlobalSetting
from app.core.utils import start_of_local_day, utcnow

logger = logging.getLogger(__name__)

# Seed date for a fresh counter: always before "today", so the first token is 1
COUNTER_EPOCH = datetime(1970, 1, 1)


class TokenCounterService:
    """
    Hands out the daily token number.

    The counter lives in the singleton ``global_settings`` row. Issuing a token
    is one conditional ``UPDATE ... RETURNING`` statement, so concurrent
    registrations serialize on the row instead of racing a separate read and
    write. The update joins the caller's transaction; the token is only
    consumed if the caller commits.
    """

    def __init__(self, db: AsyncSession, tz_name: Optional[str] = None):
        self.db = db
        self.tz_name = tz_name or settings.TOKEN_TIMEZONE

    async def issue_token(self, now: Optional[datetime] = None) -> int:
        """
        Increment the counter, restarting at 1 on a new local day.

        Args:
            now: Naive UTC timestamp to issue at (defaults to the current time)

        Returns:
            The token number for this registration

        Raises:
            ConfigurationError: If the counter row has not been initialized
        """
        now = now or utcnow()
        day_start = start_of_local_day(now, self.tz_name)

        stmt = (
            update(GlobalSetting)
            .where(GlobalSetting.id == COUNTER_ID)
            .values(
                last_token=case(
                    (GlobalSetting.last_token_date < day_start, 1),
                    else_=GlobalSetting.last_token + 1,
                ),
                last_token_date=now,
                updated_at=now,
            )
            .returning(GlobalSetting.last_token)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        token = result.scalar_one_or_none()

        if token is None:
            logger.error("Token counter row is missing; run initialize_token_counter")
            raise ConfigurationError("Token counter is not initialized")

        logger.debug(f"Issued token {token}")
        return token

    async def get_counter(self) -> GlobalSetting:
        """Current counter state."""
        result = await self.db.execute(
            select(GlobalSetting)
            .where(GlobalSetting.id == COUNTER_ID)
            .execution_options(populate_existing=True)
        )
        counter = result.scalar_one_or_none()
        if counter is None:
            raise ConfigurationError("Token counter is not initialized")
        return counter


async def initialize_token_counter(db: AsyncSession) -> GlobalSetting:
    """
    Create the counter row if it does not exist yet. Safe to call on every
    startup and from several workers at once.

    Args:
        db: Database session

    Returns:
        The singleton GlobalSetting row
    """
    result = await db.execute(
        select(GlobalSetting)
        .where(GlobalSetting.id == COUNTER_ID)
        .execution_options(populate_existing=True)
    )
    counter = result.scalar_one_or_none()
    if counter:
        return counter

    counter = GlobalSetting(
        id=COUNTER_ID,
        last_token=0,
        last_token_date=COUNTER_EPOCH,
    )
    try:
        db.add(counter)
        await db.commit()
        await db.refresh(counter)
        logger.info("Token counter initialized")
        return counter
    except IntegrityError:
        await db.rollback()
        # Another worker created it first
        result = await db.execute(
            select(GlobalSetting).where(GlobalSetting.id == COUNTER_ID)
        )
        counter = result.scalar_one_or_none()
        if not counter:
            raise ConfigurationError("Failed to create or retrieve the token counter")
        return counter
