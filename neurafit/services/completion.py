"""
Completion collaborator that records finished workouts with the backend.
"""
from neurafit.core.errors import ApiError
from neurafit.core.logger import log_error, logger
from neurafit.models.session import CompletionSummary
from neurafit.services.neurastack_client import NeuraStackClient


class BackendCompletionReporter:
    """Pass as ``on_complete`` to WorkoutSession to post summaries to workout history."""

    def __init__(self, client: NeuraStackClient, user_id: str = "") -> None:
        self._client = client
        self._user_id = user_id

    async def __call__(self, summary: CompletionSummary) -> None:
        try:
            await self._client.complete_workout(summary, user_id=self._user_id)
        except ApiError as e:
            log_error("Workout completion report", e)
            return
        logger.info(
            f"Recorded workout {summary.workoutId}: "
            f"{summary.completedExercises}/{summary.totalExercises} exercises"
        )
