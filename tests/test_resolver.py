import logging

import pytest

from ottrmap.model import (
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
from ottrmap.resolver import (
    OTTR_PREFIX_IRI,
    RDF_PREFIX_IRI,
    RDFS_PREFIX_IRI,
    XSD_PREFIX_IRI,
    BadCompositeIRIError,
    DuplicatedPrefixDefinition,
    MissingPrefixError,
    ResolutionError,
    build_prefix_map,
    display_name,
    is_valid_iri,
    resolve_document,
    resolve_name,
)

NS = "http://example.com/ns#"


def test_predefined_prefixes():
    m = build_prefix_map([])
    assert m == {
        "rdfs": RDFS_PREFIX_IRI,
        "rdf": RDF_PREFIX_IRI,
        "xsd": XSD_PREFIX_IRI,
        "ottr": OTTR_PREFIX_IRI,
    }


def test_user_prefix_overrides_predefined():
    m = build_prefix_map([PrefixDirective("xsd", NS)])
    assert m["xsd"] == NS


def test_base_binds_empty_prefix():
    m = build_prefix_map([BaseDirective(NS)])
    assert m[""] == NS


def test_conflicting_prefix_raises():
    with pytest.raises(DuplicatedPrefixDefinition) as info:
        build_prefix_map([PrefixDirective("ex", NS), PrefixDirective("ex", "urn:other:")])
    assert info.value.prefix == "ex"
    assert isinstance(info.value, ResolutionError)


def test_repeated_identical_prefix_warns(caplog):
    with caplog.at_level(logging.WARNING):
        m = build_prefix_map([PrefixDirective("ex", NS), PrefixDirective("ex", NS)])
    assert m["ex"] == NS
    assert any("ex" in r.getMessage() for r in caplog.records)


def test_resolve_prefixed_name():
    assert resolve_name(PrefixedName("ex", "Person"), {"ex": NS}) == NS + "Person"


def test_resolve_plain_iri_passes_through():
    assert resolve_name(NS + "A", {}) == NS + "A"


def test_missing_prefix():
    with pytest.raises(MissingPrefixError) as info:
        resolve_name(PrefixedName("nope", "X"), {"ex": NS})
    assert "nope:X" in str(info.value)


def test_bad_composite_iri():
    with pytest.raises(BadCompositeIRIError):
        resolve_name(PrefixedName("ex", "has space"), {"ex": NS})


@pytest.mark.parametrize(
    "iri,valid",
    [
        (NS + "Person", True),
        ("urn:isbn:123", True),
        ("no-scheme", False),
        ("http://example.com/a b", False),
        ("http://example.com/<x>", False),
        ("http://example.com/%zz", False),
        ("http://example.com/%20", True),
    ],
)
def test_is_valid_iri(iri, valid):
    assert is_valid_iri(iri) is valid


def test_display_name():
    assert display_name(PrefixedName("ex", "A")) == "ex:A"
    assert display_name(NS + "A") == "<" + NS + "A>"


def _template():
    signature = Signature(
        template_name=PrefixedName("ex", "T"),
        parameter_list=[
            Parameter(
                StottrVariable("x"),
                ptype=ListType(BasicType(PrefixedName("xsd", "string"))),
                default_value=DefaultValue(ConstantList([PrefixedName("ex", "d"), OttrNone()])),
            )
        ],
    )
    pattern = Instance(
        template_name=PrefixedName("ottr", "Triple"),
        argument_list=[
            Argument(StottrVariable("x")),
            Argument(PrefixedName("ex", "p")),
            Argument(StottrLiteral("1", None, PrefixedName("xsd", "int"))),
            Argument(TermList([BlankNode("b"), PrefixedName("ex", "o")]), list_expand=True),
        ],
    )
    return Template(signature, [pattern])


def test_resolve_document_template():
    doc = Document(directives=[PrefixDirective("ex", NS)], statements=[_template()])
    resolved = resolve_document(doc)
    assert resolved.prefix_map["ex"] == NS
    (template,) = resolved.statements
    sig = template.signature
    assert sig.template_name == NS + "T"
    assert sig.template_prefixed_name == "ex:T"
    param = sig.parameter_list[0]
    assert param.ptype == ListType(BasicType(XSD_PREFIX_IRI + "string"))
    assert str(param.ptype.inner) == "xsd:string"
    assert param.default_value.constant_term == ConstantList([NS + "d", OttrNone()])
    inst = template.pattern_list[0]
    assert inst.template_name == OTTR_PREFIX_IRI + "Triple"
    assert inst.prefixed_template_name == "ottr:Triple"
    args = inst.argument_list
    assert args[0].term == StottrVariable("x")
    assert args[1].term == NS + "p"
    assert args[2].term == StottrLiteral("1", None, XSD_PREFIX_IRI + "int")
    assert args[3].term == TermList([BlankNode("b"), NS + "o"])
    assert args[3].list_expand is True


def test_signature_and_base_template_become_empty_templates():
    doc = Document(
        directives=[BaseDirective(NS)],
        statements=[
            Signature(PrefixedName("", "S")),
            BaseTemplate(Signature(PrefixedName("", "B"))),
        ],
    )
    resolved = resolve_document(doc)
    names = [t.signature.template_name for t in resolved.statements]
    assert names == [NS + "S", NS + "B"]
    assert all(isinstance(t, Template) and t.pattern_list == [] for t in resolved.statements)


def test_ground_instance_resolved():
    doc = Document(
        directives=[PrefixDirective("ex", NS)],
        statements=[Instance(PrefixedName("ex", "T"), [Argument(PrefixedName("ex", "a"))])],
    )
    (inst,) = resolve_document(doc).statements
    assert isinstance(inst, Instance)
    assert inst.argument_list[0].term == NS + "a"


def test_patterns_resolved_before_signature():
    template = Template(
        Signature(PrefixedName("a", "T")),
        [Instance(PrefixedName("b", "U"))],
    )
    with pytest.raises(MissingPrefixError) as info:
        resolve_document(Document(statements=[template]))
    assert "b:U" in str(info.value)


def test_original_document_unchanged():
    doc = Document(directives=[PrefixDirective("ex", NS)], statements=[_template()])
    resolve_document(doc)
    assert doc.statements[0].signature.template_name == PrefixedName("ex", "T")
    assert doc.prefix_map == {}