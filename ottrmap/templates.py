"""Template datasets: merging resolved documents and inferring parameter types."""
from __future__ import annotations

import copy
import logging
from typing import Iterable, Optional

from .model import (
    BasicType,
    Document,
    Instance,
    ListType,
    NEListType,
    Parameter,
    PType,
    Signature,
    StottrVariable,
    Template,
)
from .resolver import OTTR_PREFIX_IRI, XSD_PREFIX_IRI

logger = logging.getLogger(__name__)

OTTR_TRIPLE = OTTR_PREFIX_IRI + "Triple"
XSD_ANY_URI = XSD_PREFIX_IRI + "anyURI"


class TypingError(Exception):
    """Parameter types of a template dataset are inconsistent."""


class InconsistentNumberOfArguments(TypingError):
    def __init__(self, calling: str, template: str, given: int, expected: int) -> None:
        super().__init__(
            f"Template {calling} called {template} with {given} arguments, "
            f"but expected {expected}"
        )
        self.calling = calling
        self.template = template
        self.given = given
        self.expected = expected


class IncompatibleTypes(TypingError):
    def __init__(
        self, template_name: str, variable: StottrVariable, given: str, expected: str
    ) -> None:
        super().__init__(
            f"Template {template_name} variable {variable.name} was given argument "
            f"of type {given!r} but expected {expected!r}"
        )
        self.template_name = template_name
        self.variable = variable
        self.given = given
        self.expected = expected


def _ottr_triple_template() -> Template:
    def uri_parameter(name: str) -> Parameter:
        return Parameter(
            variable=StottrVariable(name),
            ptype=BasicType(XSD_ANY_URI, "xsd:anyURI"),
        )

    return Template(
        signature=Signature(
            template_name=OTTR_TRIPLE,
            parameter_list=[
                uri_parameter("subject"),
                uri_parameter("verb"),
                Parameter(variable=StottrVariable("object")),
            ],
            annotation_list=None,
            template_prefixed_name="ottr:Triple",
        ),
        pattern_list=[],
    )


def lub(template_name: str, variable: StottrVariable, left: PType, right: PType) -> PType:
    """Least upper bound of two parameter types, or IncompatibleTypes."""
    if left == right:
        return left
    if isinstance(left, (ListType, NEListType)) and isinstance(right, (ListType, NEListType)):
        inner = lub(template_name, variable, left.inner, right.inner)
        if isinstance(left, ListType) and isinstance(right, ListType):
            return ListType(inner)
        return NEListType(inner)
    raise IncompatibleTypes(template_name, variable, str(left), str(right))


def _lub_update(
    template_name: str, variable: StottrVariable, parameter: Parameter, right: PType
) -> bool:
    if parameter.ptype is None:
        parameter.ptype = right
        return True
    if parameter.ptype == right:
        return False
    merged = lub(template_name, variable, parameter.ptype, right)
    if merged == parameter.ptype:
        return False
    parameter.ptype = merged
    return True


def _infer_template_types(template: Template, others: list) -> bool:
    changed = False
    own_name = template.signature.template_name
    for instance in template.pattern_list:
        called = next(
            (t for t in others if t.signature.template_name == instance.template_name),
            None,
        )
        if called is None:
            raise TypingError(
                f"Template {own_name} calls unknown template {instance.template_name}"
            )
        parameters = called.signature.parameter_list
        if len(instance.argument_list) != len(parameters):
            raise InconsistentNumberOfArguments(
                own_name,
                called.signature.template_name,
                len(instance.argument_list),
                len(parameters),
            )
        for argument, other_parameter in zip(instance.argument_list, parameters):
            if not isinstance(argument.term, StottrVariable):
                continue
            other_ptype = other_parameter.ptype
            if other_ptype is None:
                continue
            if argument.list_expand:
                expected = (
                    ListType(other_ptype)
                    if other_parameter.optional
                    else NEListType(other_ptype)
                )
            else:
                expected = other_ptype
            for own_parameter in template.signature.parameter_list:
                if own_parameter.variable == argument.term:
                    if _lub_update(own_name, argument.term, own_parameter, expected):
                        changed = True
    return changed


class TemplateDataset:
    """Templates and ground instances collected from resolved documents.

    The built-in ``ottr:Triple`` template is always present, and parameter
    types are inferred from how templates call one another.
    """

    def __init__(self, documents: Iterable[Document]) -> None:
        self.templates: list = []
        self.ground_instances: list = []
        self.prefix_map: dict = {}
        defined: set = set()
        for document in documents:
            for prefix, iri in document.prefix_map.items():
                if prefix in defined:
                    if prefix in self.prefix_map and self.prefix_map[prefix] != iri:
                        del self.prefix_map[prefix]
                        logger.warning(
                            "Prefix %s has conflicting definitions across documents, "
                            "consider harmonizing",
                            prefix,
                        )
                else:
                    defined.add(prefix)
                    self.prefix_map[prefix] = iri
            for statement in document.statements:
                if isinstance(statement, Template):
                    self.templates.append(copy.deepcopy(statement))
                elif isinstance(statement, Instance):
                    self.ground_instances.append(copy.deepcopy(statement))
                else:
                    raise TypeError(f"Unresolved statement {statement!r}")
        self.templates.append(_ottr_triple_template())
        self._infer_types()

    def get(self, template: str) -> Optional[Template]:
        """The template with the given IRI, or None."""
        return next(
            (t for t in self.templates if t.signature.template_name == template), None
        )

    def _infer_types(self) -> None:
        changed = True
        while changed:
            changed = False
            for index, template in enumerate(self.templates):
                others = self.templates[:index] + self.templates[index + 1:]
                if _infer_template_types(template, others):
                    changed = True