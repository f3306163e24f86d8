from __future__ import annotations

import abc
import attr as attrs
from typing import TYPE_CHECKING, Optional, Sequence

if TYPE_CHECKING:
    from .model import Dependency

from .shared import crate_location

__all__ = (
    "CrateGraphException",
    "InvalidCrateName",
    "UnknownCrateError",
    "UnknownSlotError",
    "CyclicDependenciesError",
    "DuplicateDependencyError",
    "DocumentFormatError",
)

@attrs.s(auto_attribs=True)
class CrateGraphException(Exception, abc.ABC):
    """
    Base exception for the library.
    """

    node: object
    desrc: Optional[str] = None

    def location(self) -> str:
        return crate_location(self.node)

    @abc.abstractmethod
    def msg(self) -> str:
        ...

    def __str__(self) -> str:
        return f'{self.location()}: {self.msg()}'

@attrs.s
class InvalidCrateName(CrateGraphException):
    """
    The text is not a valid dependency name.
    """
    desrc: None = attrs.ib(init=False, default=None)

    def location(self) -> str:
        return '?'

    def msg(self) -> str:
        return f"Invalid crate name {self.node!r}"


class UnknownCrateError(CrateGraphException):
    """
    A crate identifier does not designate any crate.
    """

    def msg(self) -> str:
        if self.desrc:
            return f"Unknown crate, {self.desrc}"
        return "Unknown crate"


class UnknownSlotError(UnknownCrateError):
    """
    A document slot does not designate any crate of the document.
    """

    def location(self) -> str:
        return f'slot {self.node}'


@attrs.s(auto_attribs=True)
class CyclicDependenciesError(CrateGraphException):
    """
    Adding the dependency would introduce a cycle in the graph.
    """
    dep: 'Dependency' = attrs.ib(kw_only=True)
    path: Sequence[int] = attrs.ib(kw_only=True, default=())
    desrc: None = attrs.ib(init=False, default=None)

    def msg(self) -> str:
        cycle = ' -> '.join(f'#{c}' for c in self.path) or f'#{self.node}'
        return f"Cyclic dependency {str(self.dep.name)!r} on crate #{self.dep.crate_id}: {cycle}"


@attrs.s(auto_attribs=True)
class DuplicateDependencyError(CrateGraphException):
    """
    The crate already depends on something under this name.
    """
    dep: 'Dependency' = attrs.ib(kw_only=True)
    existing: 'Dependency' = attrs.ib(kw_only=True)
    desrc: None = attrs.ib(init=False, default=None)

    def msg(self) -> str:
        return (f"Dependency name {str(self.dep.name)!r} already used "
                f"for crate #{self.existing.crate_id}")


@attrs.s(auto_attribs=True)
class DocumentFormatError(CrateGraphException):
    """
    The document does not have the expected shape.
    Raised by the structural decoder, never for semantic anomalies.
    """
    expected: Optional[str] = attrs.ib(kw_only=True, default=None)
    value: object = attrs.ib(kw_only=True, default=None)

    def location(self) -> str:
        return self.node or '<document>'

    def msg(self) -> str:
        if self.expected:
            return f"Expected {self.expected}, got: {type(self.value).__name__}"
        return f"Invalid document, {self.desrc}"
