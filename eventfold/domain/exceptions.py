"""Exceptions raised by the repository, serializers and stores."""

#: Version returned alongside :class:`NoEventsProducedError`.
NO_VERSION = -1


class EventfoldError(Exception):
    """Base class for every error raised by eventfold."""

    pass


class ConfigError(EventfoldError):
    """Raised when a repository cannot be constructed from its options."""

    pass


class NotFoundError(EventfoldError):
    """Raised by stores when no history exists for an aggregate id."""

    def __init__(self, aggregate_id: str | None = None):
        self.aggregate_id = aggregate_id
        super().__init__("not found")


class InvalidCommandError(EventfoldError):
    """Raised when a command is missing or is not addressed to an aggregate."""

    pass


class IncapableAggregateError(EventfoldError):
    """Raised when an aggregate cannot handle commands."""

    def __init__(self, aggregate_type: str):
        self.aggregate_type = aggregate_type
        super().__init__(f"aggregate, {aggregate_type}, does not implement CommandHandler")


class ApplyError(EventfoldError):
    """Raised when an aggregate fails to apply an event from its history.

    This is a programming error: the aggregate is missing a handler for an
    event it emitted, or the handler is wrong. The underlying exception is
    available as ``__cause__`` and ``reason``.
    """

    def __init__(self, aggregate_type: str, event_type: str, reason: BaseException):
        self.aggregate_type = aggregate_type
        self.event_type = event_type
        self.reason = reason
        super().__init__(
            f"repository for {aggregate_type!r} aggregate was unable to handle event, "
            f"{event_type}: this is a programming error which may be solved by updating "
            f"the on_event handlers of the aggregate: error {reason}"
        )


class NoEventsProducedError(EventfoldError):
    """Raised when a command was accepted but produced no events.

    Callers that treat a no-op command as legitimate should catch this error
    explicitly. ``version`` is always :data:`NO_VERSION`.
    """

    def __init__(self) -> None:
        self.version = NO_VERSION
        super().__init__("no events produced")


class VersionConflictError(EventfoldError):
    """Raised when appended records collide with versions already stored.

    Another writer appended to the same aggregate between load and save.
    The operation can be retried by the caller.
    """

    def __init__(self, aggregate_id: str, versions: list[int]):
        self.aggregate_id = aggregate_id
        self.versions = versions
        super().__init__(
            f"version conflict for aggregate {aggregate_id!r}: "
            f"version(s) {', '.join(str(v) for v in versions)} already stored"
        )


class EventSequenceError(EventfoldError):
    """Raised when produced events do not continue the aggregate's history."""

    pass


class DeadlineExceededError(EventfoldError, TimeoutError):
    """Raised when the active deadline expires at a store boundary."""

    pass


class SerializationError(EventfoldError):
    """Base class for serializer failures."""

    pass


class BindError(SerializationError):
    """Raised when an event type cannot be registered with a serializer."""

    pass


class UnknownEventTypeError(SerializationError):
    """Raised when a record carries an event type that was never bound."""

    def __init__(self, event_type: str):
        self.event_type = event_type
        super().__init__(f"unbound event type: {event_type!r}")


class DecodeError(SerializationError):
    """Raised when a record's bytes cannot be turned back into an event."""

    pass
