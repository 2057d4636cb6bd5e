from __future__ import annotations


class BindingError(Exception):
    """
    Graph construction error.

    Raised while wiring sockets or assembling a Sequence; a graph that raised
    one of these must not be executed.
    """


class TypeMismatch(BindingError, TypeError):
    pass


class SizeMismatch(BindingError, ValueError):
    pass


class AlreadyBound(BindingError):
    pass


class UnboundRequiredInput(BindingError):
    pass


class ProducerAfterConsumer(BindingError):
    pass


class FrozenBitsConfigError(ValueError):
    pass
