"""Federation attempt repository."""

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import FederationAttempt, FederationStatus
from ..models.base import utc_now
from .base import BaseRepository


class FederationAttemptRepository(BaseRepository[FederationAttempt]):
    """Хранилище state-записей OAuth-редиректа."""

    def __init__(self, db: AsyncSession):
        super().__init__(FederationAttempt, db)

    async def get_by_state(self, state: str) -> FederationAttempt | None:
        """
        SQL эквивалент:
            SELECT * FROM federation_attempts WHERE state = {state};
        """
        result = await self.db.execute(
            select(FederationAttempt).where(FederationAttempt.state == state)
        )
        return result.scalar_one_or_none()

    async def transition(
        self,
        attempt: FederationAttempt,
        from_status: FederationStatus,
        to_status: FederationStatus,
    ) -> bool:
        """
        Перевести попытку из from_status в to_status одной командой.

        Проверка статуса и запись происходят в одном UPDATE, поэтому из
        двух одновременных callback с одним state переход выиграет только
        один (второй увидит 0 изменённых строк).

        SQL эквивалент:
            UPDATE federation_attempts SET status = {to_status}
            WHERE id = {attempt.id} AND status = {from_status};

        Returns:
            True, если переход выполнен
        """
        result = await self.db.execute(
            update(FederationAttempt)
            .where(FederationAttempt.id == attempt.id, FederationAttempt.status == from_status)
            .values(status=to_status, updated_at=utc_now())
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            return False

        await self.db.refresh(attempt)
        return True
