import inspect
from collections.abc import Callable
from functools import singledispatch
from typing import Any, TypeVar

T = TypeVar("T")


class UnhandledMessageError(NotImplementedError):
    """Raised when no handler is registered for a message type."""

    def __init__(self, owner: type, message: object, operation_name: str):
        self.owner = owner
        self.message = message
        super().__init__(
            f"No {operation_name} registered on {owner.__name__} "
            f"for {type(message).__name__}"
        )


def _extract_handler_type(func: Callable[..., Any], param_index: int = 1) -> type:
    """Extract the message type from a handler method's annotation.

    Args:
        func: The handler method to inspect.
        param_index: Index of the parameter to extract
            (0=self, 1=first arg, etc.)

    Returns:
        The annotated type of the parameter.

    Raises:
        ValueError: If the parameter is missing or lacks a type annotation.
    """
    func_name = getattr(func, "__name__", repr(func))
    params = list(inspect.signature(func).parameters.values())

    if len(params) <= param_index:
        raise ValueError(f"Handler {func_name} must have at least {param_index + 1} parameters")

    param = params[param_index]
    if param.annotation is inspect.Parameter.empty:
        raise ValueError(
            f"Handler {func_name} parameter '{param.name}' must have a type annotation"
        )
    if isinstance(param.annotation, str):
        raise ValueError(
            f"Handler {func_name} parameter '{param.name}' must not use a string annotation"
        )
    return param.annotation


class MessageRouter:
    """Dispatches messages to type-specific handler methods.

    Uses singledispatch so handlers registered for a base class also receive
    instances of its subclasses. Unregistered types raise
    :class:`UnhandledMessageError`.
    """

    __slots__ = ("_dispatch",)

    def __init__(self, operation_name: str):
        @singledispatch
        def dispatch(message: object, instance: object) -> object:
            raise UnhandledMessageError(type(instance), message, operation_name)

        self._dispatch = dispatch

    def register(self, message_type: type, handler: Callable[[object, object], object]) -> None:
        """Register a handler for a specific message type.

        Args:
            message_type: The message class this handler processes.
            handler: The method to call when handling this message type.
        """

        # singledispatch dispatches on the first argument, handlers take self first.
        def swap(msg: object, inst: object, h: Any = handler) -> object:
            return h(inst, msg)

        self._dispatch.register(message_type)(swap)

    def route(self, instance: Any, message: Any) -> object:
        """Route a message to its registered handler.

        Args:
            instance: The instance to call the handler on (self).
            message: The message to route.

        Returns:
            The result of the handler method.
        """
        return self._dispatch(message, instance)


class HandlerDecorator:
    """Marks methods as handlers for the message type in their annotation."""

    def __init__(self, marker_attr: str, type_attr: str):
        self.marker_attr = marker_attr
        self.type_attr = type_attr

    def __call__(self, func: Callable[..., T]) -> Callable[..., T]:
        setattr(func, self.type_attr, _extract_handler_type(func, param_index=1))
        setattr(func, self.marker_attr, True)
        return func


handles_command = HandlerDecorator("_is_command_handler", "_handles_command_type")
applies_event = HandlerDecorator("_is_event_applier", "_applies_event_type")

handles_command.__doc__ = """Decorator marking a method as a command handler.

The command type is extracted from the method's type annotation.

Example:
    >>> class Person(Aggregate):
    ...     @handles_command
    ...     def create(self, cmd: CreatePerson) -> None:
    ...         self.emit(PersonCreated, name=cmd.name)
"""

applies_event.__doc__ = """Decorator marking a method as an event applier.

The event type is extracted from the method's type annotation.

Example:
    >>> class Person(Aggregate):
    ...     @applies_event
    ...     def created(self, event: PersonCreated) -> None:
    ...         self.name = event.name
"""


def setup_routing(cls: type, marker_attr: str, type_attr: str, operation_name: str) -> MessageRouter:
    """Scan a class hierarchy for decorated methods and build a router.

    Methods defined on subclasses take precedence over methods registered
    for the same message type on base classes.

    Args:
        cls: The class to set up routing for.
        marker_attr: Attribute name marking decorated methods.
        type_attr: Attribute name storing the message type.
        operation_name: Name used in errors for unregistered types.

    Returns:
        A configured MessageRouter.
    """
    router = MessageRouter(operation_name)

    for klass in reversed(cls.__mro__):
        for value in klass.__dict__.values():
            if getattr(value, marker_attr, None):
                router.register(getattr(value, type_attr), value)

    return router


def setup_command_routing(cls: type) -> MessageRouter:
    return setup_routing(cls, "_is_command_handler", "_handles_command_type", "command handler")


def setup_event_applying(cls: type) -> MessageRouter:
    return setup_routing(cls, "_is_event_applier", "_applies_event_type", "event applier")
