"""Tests for annotation-based message routing."""

import pytest

from eventfold.routing import (
    MessageRouter,
    UnhandledMessageError,
    applies_event,
    handles_command,
    setup_command_routing,
)


class Base:
    pass


class Derived(Base):
    pass


class Other:
    pass


def test_decorator_records_annotated_type():
    @handles_command
    def handle(self, message: Derived) -> None:
        pass

    assert handle._is_command_handler is True
    assert handle._handles_command_type is Derived


def test_decorator_requires_annotation():
    with pytest.raises(ValueError, match="type annotation"):

        @applies_event
        def apply(self, message) -> None:
            pass


def test_decorator_rejects_string_annotation():
    with pytest.raises(ValueError, match="string annotation"):

        @applies_event
        def apply(self, message: "Derived") -> None:
            pass


def test_decorator_requires_message_parameter():
    with pytest.raises(ValueError, match="at least 2 parameters"):

        @handles_command
        def handle(self) -> None:
            pass


def test_router_dispatches_on_message_type():
    router = MessageRouter("handler")
    router.register(Base, lambda instance, message: ("base", instance))

    assert router.route("me", Base()) == ("base", "me")


def test_router_dispatches_subclasses_to_base_handler():
    router = MessageRouter("handler")
    router.register(Base, lambda instance, message: "base")

    assert router.route(None, Derived()) == "base"


def test_router_prefers_most_specific_handler():
    router = MessageRouter("handler")
    router.register(Base, lambda instance, message: "base")
    router.register(Derived, lambda instance, message: "derived")

    assert router.route(None, Derived()) == "derived"
    assert router.route(None, Base()) == "base"


def test_router_raises_for_unregistered_type():
    router = MessageRouter("event applier")

    with pytest.raises(UnhandledMessageError, match="No event applier registered on str for Other"):
        router.route("instance", Other())


def test_unhandled_message_error_is_not_implemented_error():
    router = MessageRouter("handler")

    with pytest.raises(NotImplementedError):
        router.route(None, Other())


def test_setup_command_routing_collects_decorated_methods():
    class Handler:
        @handles_command
        def on_base(self, message: Base) -> str:
            return "base"

        @handles_command
        def on_other(self, message: Other) -> str:
            return "other"

        def undecorated(self, message: Derived) -> str:
            return "never"

    router = setup_command_routing(Handler)

    assert router.route(Handler(), Derived()) == "base"
    assert router.route(Handler(), Other()) == "other"
