"""
Swipe Service

Records left/right decisions on vacancies. A (user, vacancy) pair is swiped
at most once: the pre-check handles the common case and the unique index on
the swipes collection catches concurrent duplicates.
"""

import asyncio
import logging
from typing import List, Optional, Set

from jobswipe.common.errors import ValidationError
from jobswipe.common.models import Swipe, SwipeDirection, SwipeOutcome
from jobswipe.common.repositories import (
    CompatibilityRepositoryInterface,
    DuplicateSwipeError,
    SwipeRepositoryInterface,
)

logger = logging.getLogger(__name__)


class SwipeService:

    def __init__(
        self,
        swipes: SwipeRepositoryInterface,
        compatibility: CompatibilityRepositoryInterface,
    ):
        self.swipes = swipes
        self.compatibility = compatibility
        self._side_tasks: Set[asyncio.Task] = set()

    async def record_swipe(
        self,
        user_id: Optional[str],
        vacancy_id: Optional[str],
        direction: Optional[str],
    ) -> SwipeOutcome:
        """
        Record a swipe unless the user already swiped this vacancy.

        Raises:
            ValidationError: On missing user/vacancy or a direction other than left/right
        """
        if not user_id:
            raise ValidationError("User ID is required")
        if not vacancy_id:
            raise ValidationError("Vacancy ID is required")
        try:
            swipe_direction = SwipeDirection(direction)
        except ValueError:
            raise ValidationError("Direction must be 'left' or 'right'")

        vacancy_id = str(vacancy_id)
        if await asyncio.to_thread(self.swipes.exists, user_id, vacancy_id):
            return SwipeOutcome(already_swiped=True)

        try:
            swipe = await asyncio.to_thread(self.swipes.create, user_id, vacancy_id, swipe_direction)
        except DuplicateSwipeError:
            logger.info(f"Concurrent duplicate swipe for {user_id}/{vacancy_id}")
            return SwipeOutcome(already_swiped=True)

        task = asyncio.create_task(self._invalidate_compatibility(user_id, vacancy_id))
        self._side_tasks.add(task)
        task.add_done_callback(self._side_tasks.discard)
        return SwipeOutcome(already_swiped=False, swipe=swipe)

    async def _invalidate_compatibility(self, user_id: str, vacancy_id: str) -> None:
        try:
            await asyncio.to_thread(self.compatibility.delete, user_id, vacancy_id)
        except Exception as e:
            logger.error(f"Error deleting compatibility after swipe {user_id}/{vacancy_id}: {e}")

    async def drain(self) -> None:
        """Wait for scheduled compatibility invalidations (tests, shutdown)."""
        if self._side_tasks:
            await asyncio.gather(*list(self._side_tasks), return_exceptions=True)

    def history(self, user_id: Optional[str]) -> List[Swipe]:
        if not user_id:
            raise ValidationError("User ID is required")
        return self.swipes.history(user_id)

    def reset(self, user_id: Optional[str]) -> int:
        """Delete all of the user's swipes, returns how many were removed."""
        if not user_id:
            raise ValidationError("User ID is required")
        deleted = self.swipes.delete_all(user_id)
        logger.info(f"Reset {deleted} swipes for user {user_id}")
        return deleted

    def swiped_vacancy_ids(self, user_id: str) -> Set[str]:
        return self.swipes.swiped_vacancy_ids(user_id)
