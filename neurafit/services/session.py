"""
Workout session state machine.

WorkoutSession is the single owner of the plan, the SessionState, the tick
task and the persisted snapshot. UI code drives it through the async
methods below and renders from its read-only properties.

    idle -> generating -> ready -> active <-> resting -> completed
                            ^                    |
                            +-- generating       +--> stopped (confirmed)
"""
import asyncio
import inspect
from datetime import datetime
from typing import Awaitable, Callable, Optional

from neurafit.core.config import settings
from neurafit.core.errors import GenerationError, GenerationErrorKind
from neurafit.core.logger import log_error, logger
from neurafit.models.profile import FitnessProfile, WorkoutModifications
from neurafit.models.session import (
    CompletionSummary,
    Notice,
    ServiceStatus,
    SessionPhase,
    SessionState,
)
from neurafit.models.workout import Exercise, GenerationRequest, WorkoutPlan
from neurafit.services.neurastack_client import NeuraStackClient
from neurafit.services.persistence import WorkoutStateStore, utc_now
from neurafit.services.request_builder import (
    build_generation_request,
    build_modification_request,
    merge_modifications,
)
from neurafit.services.retry import GenerationController, Sleep
from neurafit.services.timer import WorkoutTicker, tick as advance_timers
from neurafit.services.validation import (
    validate_fitness_profile,
    validate_workout_plan,
    validate_workout_type_selection,
)

STOP_CONFIRMATION = "Are you sure you want to stop this workout? Your progress will be lost."
RESUME_CONFIRMATION = (
    "You have an unfinished workout from earlier. "
    "Would you like to resume where you left off?"
)

Confirm = Callable[[str], bool | Awaitable[bool]]
CompletionHandler = Callable[[CompletionSummary], Awaitable[None] | None]

_IN_PROGRESS = (SessionPhase.ACTIVE, SessionPhase.RESTING)


class WorkoutSession:
    """Generation, execution and recovery of one user's workout."""

    def __init__(
        self,
        client: NeuraStackClient,
        store: WorkoutStateStore,
        *,
        user_id: str = "",
        notify: Callable[[Notice], None] | None = None,
        confirm: Confirm | None = None,
        on_complete: CompletionHandler | None = None,
        sleep: Sleep = asyncio.sleep,
        auto_tick: bool = True,
        tick_interval: float | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._store = store
        self._notify = notify or (lambda notice: logger.info(f"{notice.title}: {notice.description}"))
        # Destructive actions are refused unless a confirmation callback says otherwise
        self._confirm = confirm or (lambda message: False)
        self._on_complete = on_complete
        self._clock = clock
        self._auto_tick = auto_tick
        self._ticker = WorkoutTicker(self.tick, interval=tick_interval or settings.TICK_INTERVAL_SECONDS)
        self._controller = GenerationController(
            client,
            store.storage,
            user_id=user_id,
            notify=self._notify,
            on_status=self._set_generation_status,
            sleep=sleep,
        )

        self._phase = SessionPhase.IDLE
        self._phase_before_generation = SessionPhase.IDLE
        self._plan: Optional[WorkoutPlan] = None
        self._state = SessionState()
        self._workout_type = "mixed"
        self._generation_id = 0
        self._generation_task: Optional[asyncio.Task] = None
        self._generation_status = ""
        self._service_status = ServiceStatus.UNKNOWN
        self.last_error: Optional[GenerationError] = None

    # ------------------------------------------------------------------
    # Read-only view
    # ------------------------------------------------------------------

    @property
    def phase(self) -> SessionPhase:
        if self._state.isWorkoutActive:
            return SessionPhase.RESTING if self._state.isResting else SessionPhase.ACTIVE
        return self._phase

    @property
    def plan(self) -> Optional[WorkoutPlan]:
        return self._plan

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def current_exercise(self) -> Optional[Exercise]:
        if self._plan is None or not 0 <= self._state.currentExerciseIndex < len(self._plan.exercises):
            return None
        return self._plan.exercises[self._state.currentExerciseIndex]

    @property
    def workout_type(self) -> str:
        return self._workout_type

    @property
    def generation_status(self) -> str:
        return self._generation_status

    @property
    def service_status(self) -> ServiceStatus:
        return self._service_status

    @property
    def ticking(self) -> bool:
        return self._ticker.is_running

    def set_service_status(self, status: ServiceStatus) -> None:
        self._service_status = status

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    async def request_workout(
        self,
        profile: FitnessProfile,
        workout_type: str = "mixed",
        additional_instructions: str = "",
    ) -> Optional[WorkoutPlan]:
        """
        Generate a fresh plan (idle/ready -> generating -> ready).

        Returns the new plan, or None when validation failed, generation
        failed, or the request was cancelled or superseded.
        """
        if self.phase in (SessionPhase.GENERATING, *_IN_PROGRESS):
            logger.warning(f"Ignoring workout request while {self.phase.value}")
            return None

        validation = validate_fitness_profile(profile)
        if not validation.isValid:
            self._reject(GenerationError(
                GenerationErrorKind.VALIDATION,
                "Profile Validation Error",
                ", ".join(validation.errors),
            ))
            return None

        selected = validate_workout_type_selection(workout_type)
        if selected is None:
            self._reject(GenerationError(
                GenerationErrorKind.VALIDATION,
                "Invalid Workout Type",
                f'"{workout_type}" is not supported. Please select a different workout type.',
            ))
            return None

        self._workout_type = selected
        request = build_generation_request(profile, selected, additional_instructions)
        return await self._generate(
            request,
            workout_type=selected,
            fallback_duration=profile.availableTime,
            fallback_difficulty=profile.fitnessLevel,
            success=lambda plan: Notice(
                title="Workout Generated!",
                description=f"Your personalized {plan.name} is ready.",
                severity="success",
            ),
        )

    async def modify_workout(
        self,
        profile: FitnessProfile,
        modifications: WorkoutModifications,
    ) -> Optional[WorkoutPlan]:
        """Regenerate the ready plan with new parameters; the old plan is replaced, not merged."""
        if self._plan is None or self.phase is not SessionPhase.READY:
            logger.warning(f"Ignoring modification while {self.phase.value}")
            return None

        workout_type = self._workout_type
        if modifications.workoutType:
            selected = validate_workout_type_selection(modifications.workoutType)
            if selected is None:
                self._reject(GenerationError(
                    GenerationErrorKind.VALIDATION,
                    "Invalid Workout Type",
                    f'"{modifications.workoutType}" is not supported. Please select a different workout type.',
                ))
                return None
            workout_type = selected

        merged = merge_modifications(profile, modifications)
        validation = validate_fitness_profile(merged)
        if not validation.isValid:
            self._reject(GenerationError(
                GenerationErrorKind.VALIDATION,
                "Modification Failed",
                ", ".join(validation.errors),
            ))
            return None

        request = build_modification_request(profile, modifications, self._workout_type)
        self._workout_type = workout_type
        return await self._generate(
            request,
            workout_type=workout_type,
            fallback_duration=merged.availableTime,
            fallback_difficulty=merged.fitnessLevel,
            focus_areas=modifications.focusAreas,
            success=lambda plan: Notice(
                title="Workout Modified!",
                description="Your workout has been regenerated with the new parameters.",
                severity="success",
            ),
        )

    def cancel_generation(self) -> bool:
        """Abandon an in-flight generation, e.g. when the user navigates away."""
        if self._phase is not SessionPhase.GENERATING:
            return False
        self._generation_id += 1
        self._cancel_generation_task()
        self._phase = self._phase_before_generation
        self._generation_status = ""
        logger.info("Workout generation cancelled")
        return True

    async def _generate(
        self,
        request: GenerationRequest,
        *,
        workout_type: str,
        fallback_duration: int | None,
        fallback_difficulty: str | None,
        success: Callable[[WorkoutPlan], Notice],
        focus_areas: list[str] | None = None,
    ) -> Optional[WorkoutPlan]:
        self._generation_id += 1
        generation_id = self._generation_id
        self._phase_before_generation = self._phase
        self._phase = SessionPhase.GENERATING
        self.last_error = None

        task = asyncio.ensure_future(self._controller.attempt_generation(
            request,
            workout_type=workout_type,
            fallback_duration=fallback_duration,
            fallback_difficulty=fallback_difficulty,
        ))
        self._generation_task = task
        try:
            result = await task
        except asyncio.CancelledError:
            if generation_id != self._generation_id:
                return None
            self._phase = self._phase_before_generation
            raise
        finally:
            if self._generation_task is task:
                self._generation_task = None

        if generation_id != self._generation_id:
            logger.info(f"Discarding stale generation response ({generation_id} != {self._generation_id})")
            return None

        self._generation_status = ""

        if not result.ok:
            self._phase = self._phase_before_generation
            self.last_error = result.error
            if result.error.status_code == 503:
                self._service_status = ServiceStatus.UNAVAILABLE
            self._notify(result.error.notice())
            return None

        plan = result.plan
        if focus_areas:
            plan = plan.model_copy(update={"focusAreas": list(focus_areas)})

        check = validate_workout_plan(plan)
        if not check.isValid:
            logger.warning(f"Generated workout failed validation: {check.errors}")
            self._notify(Notice(
                title="Workout Validation Warning",
                description="Generated workout has some issues but will proceed. Please review carefully.",
                severity="warning",
                durationMs=4000,
            ))
        if check.warnings:
            logger.info(f"Workout validation warnings: {check.warnings}")

        self._service_status = ServiceStatus.HEALTHY
        self._plan = plan
        self._state = SessionState()
        self._phase = SessionPhase.READY
        self._notify(success(plan))
        return plan

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    async def start_workout(self) -> bool:
        """ready -> active: fresh counters, start time now, ticking begins."""
        if self._plan is None or self.phase not in (
            SessionPhase.READY, SessionPhase.STOPPED, SessionPhase.COMPLETED
        ):
            logger.warning(f"Cannot start workout while {self.phase.value}")
            return False

        self._set_state(SessionState(isWorkoutActive=True, workoutStartTime=self._clock()))
        self._phase = SessionPhase.READY
        self._start_ticker()
        self._notify(Notice(
            title="Workout Started!",
            description="Good luck with your training session.",
            durationMs=2000,
        ))
        return True

    async def complete_exercise(self) -> bool:
        """
        Mark the current exercise done.

        Moves into the exercise's rest period and on to the next exercise,
        or finishes the workout when it was the last one.
        """
        if self._plan is None or self.phase is not SessionPhase.ACTIVE:
            logger.warning(f"Cannot complete exercise while {self.phase.value}")
            return False

        index = self._state.currentExerciseIndex
        total = len(self._plan.exercises)
        if not 0 <= index < total:
            logger.warning(f"Exercise index {index} out of range for {total} exercises")
            return False

        completed = self._state.completedExercises | {index}

        if index < total - 1:
            rest = self._plan.exercises[index].restTime
            self._set_state(self._state.model_copy(update={
                "completedExercises": completed,
                "restTimerSeconds": rest,
                "isResting": rest > 0,
                "currentExerciseIndex": index + 1,
                "exerciseTimerSeconds": 0,
            }))
            return True

        await self._finish(completed)
        return True

    def skip_rest(self) -> bool:
        """resting -> active, same as the rest timer running out."""
        if self.phase is not SessionPhase.RESTING:
            return False
        self._set_state(self._state.model_copy(update={"isResting": False, "restTimerSeconds": 0}))
        return True

    def tick(self) -> None:
        """Advance the session clock by one second."""
        if self._plan is None or not self._state.isWorkoutActive:
            self._stop_ticker()
            return
        self._set_state(advance_timers(self._state))

    async def stop_workout(self) -> bool:
        """Abort an in-progress workout after the user confirms."""
        if self.phase not in _IN_PROGRESS:
            return False

        if not await self._ask(STOP_CONFIRMATION):
            return False

        self._stop_ticker()
        self._generation_id += 1
        self._cancel_generation_task()
        self._state = SessionState()
        self._phase = SessionPhase.STOPPED
        self._store.clear()
        self._notify(Notice(
            title="Workout Stopped",
            description="You can start a new workout anytime.",
        ))
        return True

    def swap_exercise(self, index: int, exercise: Exercise) -> bool:
        """Replace one exercise of the plan without touching session progress."""
        if self._plan is None or self.phase not in (SessionPhase.READY, *_IN_PROGRESS):
            return False
        if not 0 <= index < len(self._plan.exercises):
            logger.warning(f"Swap index {index} out of range")
            return False

        self._plan = self._plan.replace_exercise(index, exercise)
        if self._state.isWorkoutActive:
            self._store.save(self._plan, self._state)
        self._notify(Notice(
            title="Exercise Swapped!",
            description=f"Replaced with {exercise.name}",
            severity="success",
        ))
        return True

    # ------------------------------------------------------------------
    # Recovery
    # ------------------------------------------------------------------

    async def offer_resume(self) -> bool:
        """
        Offer to restore a persisted workout on start-up.

        Only asked when nothing is loaded in memory. Declining discards
        the snapshot.
        """
        snapshot = self._store.load()
        if snapshot is None or self._plan is not None:
            return False

        if not await self._ask(RESUME_CONFIRMATION):
            self._store.clear()
            return False

        state = snapshot.to_session_state()
        if state.workoutStartTime is None:
            state = state.model_copy(update={"workoutStartTime": self._clock()})

        self._plan = snapshot.workout
        self._workout_type = snapshot.workout.workoutType
        self._phase = SessionPhase.READY
        self._set_state(state)
        self._start_ticker()
        self._notify(Notice(
            title="Workout Resumed",
            description="Continuing from where you left off.",
        ))
        return True

    async def close(self) -> None:
        """Tear down timers and pending generation; persisted state is kept."""
        self._stop_ticker()
        self._generation_id += 1
        self._cancel_generation_task()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _set_state(self, state: SessionState) -> None:
        self._state = state
        if state.isWorkoutActive:
            self._store.save(self._plan, state)

    async def _finish(self, completed: set[int]) -> None:
        self._stop_ticker()
        now = self._clock()
        started = self._state.workoutStartTime
        summary = CompletionSummary(
            workoutId=self._plan.id,
            workoutName=self._plan.name,
            completedExercises=len(completed),
            totalExercises=len(self._plan.exercises),
            startedAt=started,
            completedAt=now,
            actualDurationMinutes=int((now - started).total_seconds() // 60) if started else 0,
        )

        self._state = self._state.model_copy(update={
            "completedExercises": completed,
            "isWorkoutActive": False,
            "isResting": False,
            "restTimerSeconds": 0,
        })
        self._phase = SessionPhase.COMPLETED
        self._store.clear()
        self._notify(Notice(
            title="Workout Complete!",
            description=(
                f"Great job! You completed {summary.completedExercises}/"
                f"{summary.totalExercises} exercises."
            ),
            severity="success",
        ))

        if self._on_complete is None:
            return
        try:
            outcome = self._on_complete(summary)
            if inspect.isawaitable(outcome):
                await outcome
        except Exception as e:
            log_error("Completion handler", e)

    async def _ask(self, message: str) -> bool:
        answer = self._confirm(message)
        if inspect.isawaitable(answer):
            answer = await answer
        return bool(answer)

    def _reject(self, error: GenerationError) -> None:
        self.last_error = error
        logger.warning(f"{error.title}: {error.description}")
        self._notify(error.notice())

    def _set_generation_status(self, text: str) -> None:
        self._generation_status = text

    def _start_ticker(self) -> None:
        if self._auto_tick:
            self._ticker.start()

    def _stop_ticker(self) -> None:
        self._ticker.stop()

    def _cancel_generation_task(self) -> None:
        if self._generation_task is not None and not self._generation_task.done():
            self._generation_task.cancel()
        self._generation_task = None
