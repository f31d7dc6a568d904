"""Resolution of prefixed names in stOTTR documents to full IRIs."""
from __future__ import annotations

import logging
import re
from typing import Iterable

from .model import (
    Annotation,
    Argument,
    BaseDirective,
    BaseTemplate,
    BasicType,
    BlankNode,
    ConstantList,
    DefaultValue,
    Document,
    Instance,
    ListType,
    LUBType,
    Name,
    NEListType,
    OttrNone,
    Parameter,
    PrefixDirective,
    PrefixedName,
    Signature,
    StottrLiteral,
    StottrVariable,
    Template,
    TermList,
)

logger = logging.getLogger(__name__)

RDFS_PREFIX = "rdfs"
RDFS_PREFIX_IRI = "http://www.w3.org/2000/01/rdf-schema#"
RDF_PREFIX = "rdf"
RDF_PREFIX_IRI = "http://www.w3.org/1999/02/22-rdf-syntax-ns#"
XSD_PREFIX = "xsd"
XSD_PREFIX_IRI = "http://www.w3.org/2001/XMLSchema#"
OTTR_PREFIX = "ottr"
OTTR_PREFIX_IRI = "http://ns.ottr.xyz/0.4/"

PREDEFINED_PREFIXES = (
    (RDFS_PREFIX, RDFS_PREFIX_IRI),
    (RDF_PREFIX, RDF_PREFIX_IRI),
    (XSD_PREFIX, XSD_PREFIX_IRI),
    (OTTR_PREFIX, OTTR_PREFIX_IRI),
)


class ResolutionError(Exception):
    """A document could not be resolved."""


class DuplicatedPrefixDefinition(ResolutionError):
    def __init__(self, prefix: str, first: str, second: str) -> None:
        super().__init__(f"Prefix {prefix} has two definitions: {first} and {second}")
        self.prefix = prefix
        self.first = first
        self.second = second


class BadCompositeIRIError(ResolutionError):
    def __init__(self, iri: str) -> None:
        super().__init__(f"Bad composite IRI {iri}")
        self.iri = iri


class MissingPrefixError(ResolutionError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Prefix {name} is not defined")
        self.name = name


_SCHEME = re.compile(r"[A-Za-z][A-Za-z0-9+.\-]*:")
_BAD_PERCENT = re.compile(r"%(?![0-9A-Fa-f]{2})")
_FORBIDDEN = frozenset('<>"{}|^`\\')


def is_valid_iri(iri: str) -> bool:
    """Return whether ``iri`` is an absolute IRI."""
    if not _SCHEME.match(iri):
        return False
    for char in iri:
        code = ord(char)
        if char in _FORBIDDEN or code <= 0x20 or 0x7F <= code <= 0x9F:
            return False
    if _BAD_PERCENT.search(iri):
        return False
    return iri.count("#") <= 1


def _insert_or_raise(key: str, value: str, prefix_map: dict) -> None:
    previous = prefix_map.get(key)
    prefix_map[key] = value
    if previous is None:
        return
    if previous != value:
        raise DuplicatedPrefixDefinition(key, value, previous)
    logger.warning("Prefix %s was defined as %s two times", key, value)


def build_prefix_map(directives: Iterable) -> dict:
    """Map prefixes to IRIs from directives, adding the predefined prefixes."""
    prefix_map: dict = {}
    for directive in directives:
        match directive:
            case PrefixDirective(name=name, iri=iri):
                _insert_or_raise(name, iri, prefix_map)
            case BaseDirective(iri=iri):
                _insert_or_raise("", iri, prefix_map)
            case _:
                raise TypeError(f"Unknown directive {directive!r}")
    for prefix, iri in PREDEFINED_PREFIXES:
        prefix_map.setdefault(prefix, iri)
    return prefix_map


def resolve_name(name: Name, prefix_map: dict) -> str:
    """Expand a prefixed name to an IRI; plain IRIs pass through."""
    if isinstance(name, str):
        return name
    namespace = prefix_map.get(name.prefix)
    if namespace is None:
        raise MissingPrefixError(str(name))
    iri = namespace + name.name
    if not is_valid_iri(iri):
        raise BadCompositeIRIError(iri)
    return iri


def display_name(name: Name) -> str:
    """How a name is shown: ``prefix:local`` or ``<iri>``."""
    if isinstance(name, PrefixedName):
        return str(name)
    return f"<{name}>"


def _resolve_constant(term, prefix_map: dict):
    match term:
        case ConstantList(items=items):
            return ConstantList(tuple(_resolve_constant(t, prefix_map) for t in items))
        case StottrLiteral(value=value, language=language, data_type_iri=data_type):
            resolved = None if data_type is None else resolve_name(data_type, prefix_map)
            return StottrLiteral(value, language, resolved)
        case BlankNode() | OttrNone():
            return term
        case str() | PrefixedName():
            return resolve_name(term, prefix_map)
    raise TypeError(f"Unknown constant term {term!r}")


def _resolve_term(term, prefix_map: dict):
    match term:
        case StottrVariable():
            return term
        case TermList(items=items):
            return TermList(tuple(_resolve_term(t, prefix_map) for t in items))
    return _resolve_constant(term, prefix_map)


def _resolve_ptype(ptype, prefix_map: dict):
    match ptype:
        case BasicType(name=name):
            return BasicType(resolve_name(name, prefix_map), display_name(name))
        case LUBType(inner=inner):
            return LUBType(_resolve_ptype(inner, prefix_map))
        case ListType(inner=inner):
            return ListType(_resolve_ptype(inner, prefix_map))
        case NEListType(inner=inner):
            return NEListType(_resolve_ptype(inner, prefix_map))
    raise TypeError(f"Unknown parameter type {ptype!r}")


def _resolve_parameter(parameter: Parameter, prefix_map: dict) -> Parameter:
    ptype = None if parameter.ptype is None else _resolve_ptype(parameter.ptype, prefix_map)
    default = None
    if parameter.default_value is not None:
        default = DefaultValue(
            _resolve_constant(parameter.default_value.constant_term, prefix_map)
        )
    return Parameter(
        variable=parameter.variable,
        optional=parameter.optional,
        non_blank=parameter.non_blank,
        ptype=ptype,
        default_value=default,
    )


def _resolve_instance(instance: Instance, prefix_map: dict) -> Instance:
    arguments = [
        Argument(_resolve_term(a.term, prefix_map), a.list_expand)
        for a in instance.argument_list
    ]
    return Instance(
        template_name=resolve_name(instance.template_name, prefix_map),
        argument_list=arguments,
        list_expander=instance.list_expander,
        prefixed_template_name=display_name(instance.template_name),
    )


def _resolve_signature(signature: Signature, prefix_map: dict) -> Signature:
    parameters = [_resolve_parameter(p, prefix_map) for p in signature.parameter_list]
    annotations = None
    if signature.annotation_list is not None:
        annotations = [
            Annotation(_resolve_instance(a.instance, prefix_map))
            for a in signature.annotation_list
        ]
    prefixed = display_name(signature.template_name)
    return Signature(
        template_name=resolve_name(signature.template_name, prefix_map),
        parameter_list=parameters,
        annotation_list=annotations,
        template_prefixed_name=prefixed,
    )


def _resolve_statement(statement, prefix_map: dict):
    match statement:
        case Signature():
            return Template(_resolve_signature(statement, prefix_map), [])
        case Template(signature=signature, pattern_list=patterns):
            resolved_patterns = [_resolve_instance(i, prefix_map) for i in patterns]
            return Template(_resolve_signature(signature, prefix_map), resolved_patterns)
        case BaseTemplate(signature=signature):
            return Template(_resolve_signature(signature, prefix_map), [])
        case Instance():
            return _resolve_instance(statement, prefix_map)
    raise TypeError(f"Unknown statement {statement!r}")


def resolve_document(document: Document) -> Document:
    """Return a copy of ``document`` with every name expanded to an IRI."""
    directives = list(document.directives)
    prefix_map = build_prefix_map(directives)
    statements = [_resolve_statement(s, prefix_map) for s in document.statements]
    return Document(directives=directives, statements=statements, prefix_map=prefix_map)