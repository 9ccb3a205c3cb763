"""Session Validation — explicit checks run before a TimerSession is built.

Invariants:
    - All functions are PURE: no IO, no side effects
    - Validators never raise: they return a ValidationResult listing every failure
    - build_session() is only called with a draft whose result is ok

Design Decisions:
    - Typed result over exceptions: callers can report all field errors at once;
      the service decides whether a failed result becomes an HTTP error
    - Defaults (planned minutes, title) applied in build_session, not in the draft,
      so validation sees exactly what the client sent
"""

from dataclasses import dataclass, field
from datetime import datetime

from focuslab.core.domain_types import (
    DEFAULT_PLANNED_MINUTES, DEFAULT_TITLES, MAX_INTERRUPTION_REASON_LENGTH,
    MAX_NOTES_LENGTH, MAX_OWNER_ID_LENGTH, MAX_PLANNED_MINUTES, MAX_RATING,
    MAX_TAG_LENGTH, MAX_TITLE_LENGTH, MIN_INTERRUPTION_MILLIS,
    MIN_PLANNED_MINUTES, MIN_RATING, TimerKind,
)
from focuslab.core.timer_session import TimerSession


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str
    code: str


@dataclass(frozen=True)
class ValidationResult:
    errors: tuple[FieldError, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.errors


@dataclass
class SessionDraft:
    """Raw start-session input, as received."""
    owner_id: str
    kind: str = TimerKind.POMODORO.value
    planned_duration_minutes: int | None = None
    goal_id: str | None = None
    title: str | None = None
    tags: list[str] = field(default_factory=list)


def validate_session_draft(draft: SessionDraft) -> ValidationResult:
    """Check a start-session draft. Returns every failure, never raises."""
    errors: list[FieldError] = []

    if not isinstance(draft.owner_id, str) or not draft.owner_id.strip():
        errors.append(FieldError("owner_id", "Owner is required", "missing"))
    elif len(draft.owner_id.strip()) > MAX_OWNER_ID_LENGTH:
        errors.append(FieldError(
            "owner_id",
            f"Owner id cannot exceed {MAX_OWNER_ID_LENGTH} characters", "too_long",
        ))

    if draft.kind not in {k.value for k in TimerKind}:
        allowed = ", ".join(k.value for k in TimerKind)
        errors.append(FieldError(
            "kind", f"Kind must be one of: {allowed}", "enum",
        ))

    planned = draft.planned_duration_minutes
    if planned is not None:
        if isinstance(planned, bool) or not isinstance(planned, int):
            errors.append(FieldError(
                "planned_duration_minutes", "Duration must be a whole number of minutes",
                "int_type",
            ))
        elif not MIN_PLANNED_MINUTES <= planned <= MAX_PLANNED_MINUTES:
            errors.append(FieldError(
                "planned_duration_minutes",
                f"Duration must be between {MIN_PLANNED_MINUTES} and "
                f"{MAX_PLANNED_MINUTES} minutes",
                "range",
            ))

    if draft.goal_id is not None and not str(draft.goal_id).strip():
        errors.append(FieldError("goal_id", "Goal id cannot be blank", "blank"))

    if draft.title is not None and len(draft.title.strip()) > MAX_TITLE_LENGTH:
        errors.append(FieldError(
            "title", f"Title cannot exceed {MAX_TITLE_LENGTH} characters", "too_long",
        ))

    for i, tag in enumerate(draft.tags):
        if len(tag.strip()) > MAX_TAG_LENGTH:
            errors.append(FieldError(
                f"tags.{i}", f"Tag cannot exceed {MAX_TAG_LENGTH} characters", "too_long",
            ))

    return ValidationResult(tuple(errors))


def validate_completion_details(
    notes: str | None, productivity_rating: int | None,
) -> ValidationResult:
    """Check the optional notes/rating sent when completing a session."""
    errors: list[FieldError] = []
    if notes is not None and len(notes.strip()) > MAX_NOTES_LENGTH:
        errors.append(FieldError(
            "notes", f"Notes cannot exceed {MAX_NOTES_LENGTH} characters", "too_long",
        ))
    if productivity_rating is not None and not (
        MIN_RATING <= productivity_rating <= MAX_RATING
    ):
        errors.append(FieldError(
            "productivity_rating",
            f"Productivity rating must be between {MIN_RATING} and {MAX_RATING}",
            "range",
        ))
    return ValidationResult(tuple(errors))


def validate_interruption(reason: str, duration_millis: int) -> ValidationResult:
    """Check an interruption entry before it is appended to a session."""
    errors: list[FieldError] = []
    if not reason or not reason.strip():
        errors.append(FieldError("reason", "Reason is required", "missing"))
    elif len(reason.strip()) > MAX_INTERRUPTION_REASON_LENGTH:
        errors.append(FieldError(
            "reason",
            f"Reason cannot exceed {MAX_INTERRUPTION_REASON_LENGTH} characters",
            "too_long",
        ))
    if isinstance(duration_millis, bool) or not isinstance(duration_millis, int):
        errors.append(FieldError(
            "duration_millis", "Duration must be a whole number of milliseconds",
            "int_type",
        ))
    elif duration_millis < MIN_INTERRUPTION_MILLIS:
        errors.append(FieldError(
            "duration_millis",
            f"Duration must be at least {MIN_INTERRUPTION_MILLIS} milliseconds",
            "range",
        ))
    return ValidationResult(tuple(errors))


def build_session(draft: SessionDraft, started_at: datetime) -> TimerSession:
    """Build a running session from a validated draft, filling defaults."""
    kind = TimerKind(draft.kind)
    planned = draft.planned_duration_minutes or DEFAULT_PLANNED_MINUTES[kind]
    title = (draft.title or "").strip() or DEFAULT_TITLES[kind]
    tags = tuple(t.strip().lower() for t in draft.tags if t.strip())
    return TimerSession(
        owner_id=draft.owner_id.strip(),
        kind=kind,
        planned_duration_minutes=planned,
        started_at=started_at,
        goal_id=draft.goal_id,
        title=title,
        tags=tags,
    )
