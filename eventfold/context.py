import contextvars
import time
from dataclasses import dataclass, replace

from ulid import ULID


@dataclass(frozen=True)
class ExecutionContext:
    """Immutable, request-scoped context for repository operations.

    ExecutionContext carries the causal relationship between commands and
    events, and an optional deadline that bounds every store call made while
    the context is active.

    Attributes:
        correlation_id: Unique ID that traces an entire logical operation.
            Remains constant throughout the flow.
        causation_id: ID of what directly caused the current operation.
        command_id: Unique identifier for the command being executed.
            Events emitted while the command is handled use it as their
            causation_id.
        deadline: Absolute ``time.monotonic()`` value after which store
            calls fail with DeadlineExceededError. None means no deadline.

    Examples:
        Create a new context at a system entry point with a 2 second budget:

        >>> ctx = ExecutionContext.create(timeout=2.0)
        >>> token = set_context(ctx)
        >>> try:
        ...     version = await repository.apply(command)
        ... finally:
        ...     reset_context(token)
    """

    correlation_id: ULID | None = None
    causation_id: ULID | None = None
    command_id: ULID | None = None
    deadline: float | None = None

    @classmethod
    def create(
        cls,
        correlation_id: ULID | None = None,
        timeout: float | None = None,
    ) -> "ExecutionContext":
        """Create a new context, typically at a system entry point.

        Args:
            correlation_id: Optional correlation ID. If not provided, a new
                ULID is generated. causation_id is set to correlation_id
                (self-referencing at entry).
            timeout: Optional budget in seconds for the whole operation.

        Returns:
            A new ExecutionContext instance.
        """
        if correlation_id is None:
            correlation_id = ULID()

        ctx = cls(correlation_id=correlation_id, causation_id=correlation_id)
        return ctx.with_timeout(timeout) if timeout is not None else ctx

    def for_command(self, command_id: ULID) -> "ExecutionContext":
        """Create a child context for executing a command.

        The correlation_id and deadline are inherited.
        """
        return replace(self, command_id=command_id)

    def with_causation(self, causation_id: ULID) -> "ExecutionContext":
        return replace(self, causation_id=causation_id)

    def with_timeout(self, seconds: float) -> "ExecutionContext":
        """Create a context whose deadline is ``seconds`` from now.

        An existing, earlier deadline is kept.
        """
        deadline = time.monotonic() + seconds
        if self.deadline is not None:
            deadline = min(deadline, self.deadline)
        return replace(self, deadline=deadline)

    def remaining(self) -> float | None:
        """Seconds left before the deadline, or None without a deadline.

        The result is never negative.
        """
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())


_context: contextvars.ContextVar[ExecutionContext | None] = contextvars.ContextVar(
    "execution_context", default=None
)


def get_context() -> ExecutionContext:
    """Get the current execution context.

    If no context has been set, returns an empty ExecutionContext with all
    fields None.
    """
    ctx = _context.get()
    if ctx is None:
        return ExecutionContext()
    return ctx


def set_context(context: ExecutionContext) -> contextvars.Token[ExecutionContext | None]:
    """Set the current execution context.

    Returns:
        A token that restores the previous context via reset_context().
    """
    return _context.set(context)


def reset_context(token: contextvars.Token[ExecutionContext | None]) -> None:
    _context.reset(token)


def clear_context() -> None:
    """Clear the current execution context (useful in tests)."""
    _context.set(None)


def get_or_create_context() -> ExecutionContext:
    """Get the current context, or create and set a new one if none is set."""
    ctx = _context.get()
    if ctx is None:
        ctx = ExecutionContext.create()
        set_context(ctx)
    return ctx
