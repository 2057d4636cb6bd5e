from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Optional

import numpy as np

from fecsim.engine.errors import AlreadyBound, SizeMismatch, TypeMismatch

if TYPE_CHECKING:
    from fecsim.engine.task import Task


class ElementType(Enum):
    """
    Closed set of element types a socket buffer can carry.
    The value is the numpy dtype name backing the buffer.
    """
    INT8 = "int8"
    INT32 = "int32"
    INT64 = "int64"
    FLOAT32 = "float32"
    FLOAT64 = "float64"

    @property
    def dtype(self) -> np.dtype:
        return np.dtype(self.value)


class Direction(Enum):
    IN = "in"
    OUT = "out"


class Socket:
    """
    Typed, sized endpoint of a Task.

    Output sockets own their buffer. Input sockets own nothing: once bound,
    `data` is the producer's ndarray object (aliasing, never a copy), so a
    consumer always reads what the producer wrote last.
    """

    def __init__(self, task: "Task", name: str, direction: Direction, etype: ElementType, count: int):
        if not isinstance(name, str) or not name:
            raise ValueError("socket name must be a non-empty string")
        if not isinstance(etype, ElementType):
            raise TypeError(f"socket '{name}': etype must be an ElementType, got {etype!r}")
        if not isinstance(count, int) or count <= 0:
            raise ValueError(f"socket '{name}': count must be a positive int, got {count!r}")

        self.task = task
        self.name = name
        self.direction = direction
        self.etype = etype
        self.count = count
        self.bound_to: Optional[Socket] = None

        if direction is Direction.OUT:
            self.data: Optional[np.ndarray] = np.zeros(count, dtype=etype.dtype)
        else:
            self.data = None

    @property
    def full_name(self) -> str:
        return f"{self.task.full_name}::{self.name}"

    @property
    def is_bound(self) -> bool:
        return self.bound_to is not None

    def bind(self, src: "Socket") -> None:
        """
        Bind this input socket to the output socket `src`.
        """
        bind(src, self)

    def __repr__(self) -> str:
        return f"Socket({self.full_name}, {self.direction.value}, {self.etype.value}[{self.count}])"


def bind(src: Socket, dst: Socket) -> None:
    """
    Connect producer output `src` to consumer input `dst`.

    Validated immediately:
      - direction (out -> in)
      - element type (TypeMismatch)
      - element count (SizeMismatch)
      - single producer per input (AlreadyBound)
    """
    if src.direction is not Direction.OUT:
        raise TypeMismatch(f"bind: producer {src.full_name} is not an output socket")
    if dst.direction is not Direction.IN:
        raise TypeMismatch(f"bind: consumer {dst.full_name} is not an input socket")

    if dst.bound_to is not None:
        raise AlreadyBound(
            f"bind: {dst.full_name} is already bound to {dst.bound_to.full_name} "
            f"(requested {src.full_name})"
        )
    if src.etype is not dst.etype:
        raise TypeMismatch(
            f"bind: {src.full_name} carries {src.etype.value} but "
            f"{dst.full_name} expects {dst.etype.value}"
        )
    if src.count != dst.count:
        raise SizeMismatch(
            f"bind: {src.full_name} has {src.count} elements but "
            f"{dst.full_name} expects {dst.count}"
        )

    dst.bound_to = src
    dst.data = src.data
