"""Syntax tree of stOTTR documents, before and after prefix resolution.

Names are either plain IRI strings or :class:`PrefixedName` values. After
resolution every name is a plain IRI string.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Union


@dataclass(frozen=True)
class PrefixedName:
    """A name written as ``prefix:local``."""

    prefix: str
    name: str

    def __str__(self) -> str:
        return f"{self.prefix}:{self.name}"


Name = Union[str, PrefixedName]


@dataclass(frozen=True)
class PrefixDirective:
    """``@prefix name: <iri> .``"""

    name: str
    iri: str


@dataclass(frozen=True)
class BaseDirective:
    """``@base <iri> .``; binds the empty prefix."""

    iri: str


Directive = Union[PrefixDirective, BaseDirective]


@dataclass(frozen=True)
class StottrVariable:
    name: str


@dataclass(frozen=True)
class StottrLiteral:
    value: str
    language: Optional[str] = None
    data_type_iri: Optional[Name] = None


@dataclass(frozen=True)
class BlankNode:
    label: str


@dataclass(frozen=True)
class OttrNone:
    """The ``none`` constant."""


@dataclass(frozen=True)
class ConstantList:
    items: tuple = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "items", tuple(self.items))


@dataclass(frozen=True)
class TermList:
    """A list of terms that may hold variables."""

    items: tuple = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "items", tuple(self.items))


ConstantTerm = Union[str, PrefixedName, BlankNode, StottrLiteral, OttrNone, ConstantList]
StottrTerm = Union[StottrVariable, TermList, ConstantTerm]


@dataclass(frozen=True)
class BasicType:
    """A named type; ``display`` is how it was written and is not compared."""

    name: Name
    display: Optional[str] = field(default=None, compare=False)

    def __str__(self) -> str:
        return self.display if self.display is not None else str(self.name)


@dataclass(frozen=True)
class LUBType:
    inner: "PType"

    def __str__(self) -> str:
        return f"LUB<{self.inner}>"


@dataclass(frozen=True)
class ListType:
    inner: "PType"

    def __str__(self) -> str:
        return f"List<{self.inner}>"


@dataclass(frozen=True)
class NEListType:
    inner: "PType"

    def __str__(self) -> str:
        return f"NEList<{self.inner}>"


PType = Union[BasicType, LUBType, ListType, NEListType]


@dataclass(frozen=True)
class DefaultValue:
    constant_term: ConstantTerm


@dataclass
class Parameter:
    variable: StottrVariable
    optional: bool = False
    non_blank: bool = False
    ptype: Optional[PType] = None
    default_value: Optional[DefaultValue] = None


@dataclass(frozen=True)
class Argument:
    term: StottrTerm
    list_expand: bool = False


@dataclass
class Instance:
    template_name: Name
    argument_list: list = field(default_factory=list)
    list_expander: Any = None
    prefixed_template_name: Optional[str] = None


@dataclass
class Annotation:
    instance: Instance


@dataclass
class Signature:
    template_name: Name
    parameter_list: list = field(default_factory=list)
    annotation_list: Optional[list] = None
    template_prefixed_name: Optional[str] = None


@dataclass
class BaseTemplate:
    signature: Signature


@dataclass
class Template:
    signature: Signature
    pattern_list: list = field(default_factory=list)


Statement = Union[Signature, BaseTemplate, Template, Instance]


@dataclass
class Document:
    directives: list = field(default_factory=list)
    statements: list = field(default_factory=list)
    prefix_map: dict = field(default_factory=dict)