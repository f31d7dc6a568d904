# ottrmap

`ottrmap` works with stOTTR templates and the RDF triples they produce.

It has these modules:

- `ottrmap.model` holds the syntax tree of a stOTTR document: directives,
  templates, signatures, parameters, instances, terms and parameter types.
  You build it out of plain dataclasses. A name is either a plain IRI string or
  a `PrefixedName`.
- `ottrmap.resolver` expands every prefixed name in a `Document` into a full
  IRI. The prefixes come from the document's `PrefixDirective` and
  `BaseDirective` entries. The `rdf`, `rdfs`, `xsd` and `ottr` prefixes are
  defined in advance.
- `ottrmap.templates` provides `TemplateDataset`. It gathers templates and
  ground instances from resolved documents, adds the built-in `ottr:Triple`
  template, and infers parameter types from how templates call one another.
- `ottrmap.triplestore` provides `Triplestore`. It keeps triples in pandas data
  frames, grouped by predicate and by object type, and removes duplicates on
  request.
- `ottrmap.conversion` provides `convert_to_string`. It turns a column of
  objects into their lexical forms: datetimes become `xsd:dateTime` text and
  booleans become `true` or `false`.

## Installation

```
pip install ottrmap
```

Install the `test` extra to run the test suite:

```
pip install "ottrmap[test]"
```

## Resolving a document

```python
from ottrmap.model import Document, PrefixDirective, PrefixedName, Signature, Template
from ottrmap.resolver import resolve_document

doc = Document(
    directives=[PrefixDirective("ex", "http://example.com/ns#")],
    statements=[
        Template(
            signature=Signature(
                template_name=PrefixedName("ex", "Person"),
                parameter_list=[],
            ),
            pattern_list=[],
        )
    ],
)
resolved = resolve_document(doc)
```

`resolve_document` returns a new `Document`. Every signature, base template
and template in it becomes a `Template`. Each signature and instance also
records how its name was written, in `template_prefixed_name` or
`prefixed_template_name`.

Resolving stops with a `ResolutionError` in these cases:

| Cause | Error raised |
| --- | --- |
| A prefix that is never defined | `MissingPrefixError` |
| One prefix defined twice with different IRIs | `DuplicatedPrefixDefinition` |
| A prefix and a local name that do not combine into a valid IRI | `BadCompositeIRIError` |

The lower-level helpers `build_prefix_map`, `resolve_name`, `display_name` and
`is_valid_iri` are also available.

## Building a template dataset

```python
from ottrmap.templates import TemplateDataset

dataset = TemplateDataset([resolved])
template = dataset.get("http://example.com/ns#Person")
```

When documents disagree about a prefix, that prefix is dropped from the
dataset's `prefix_map` and a warning is logged. Type inference can fail with a
`TypingError`:

| Error | Cause |
| --- | --- |
| `InconsistentNumberOfArguments` | An instance gives a template the wrong number of arguments |
| `IncompatibleTypes` | Two types have no least upper bound |
| `TypingError` | A template calls a template that is not in the dataset |

`lub(template_name, variable, left, right)` computes the least upper bound on
its own. For list types, `NEList` wins over `List`.

## Storing triples

```python
import pandas as pd
from ottrmap.triplestore import RDFNodeType, Triplestore, TriplesToAdd

store = Triplestore()
df = pd.DataFrame(
    {
        "subject": ["http://example.com/a"],
        "verb": ["http://example.com/knows"],
        "object": ["http://example.com/b"],
    }
)
store.add_triples_vec(
    [TriplesToAdd(df=df, object_type=RDFNodeType.iri())],
    call_uuid="first-call",
)
store.deduplicate()

for predicate, object_type, table in store.tables():
    print(predicate, object_type, table.frames())
```

Before storing, the store drops rows that have missing values. It also drops
duplicate rows, unless `has_unique_subset` is set. If you give a
`static_verb_column`, every row takes that predicate and the frame needs no
`verb` column. A table becomes non-unique when frames from different call ids
are added to it. `deduplicate()` then merges those frames.

Each object type puts triples in one of three groups
(`RDFNodeType.find_triple_type()`):

| Object type | `TripleType` |
| --- | --- |
| `RDFNodeType.iri()` | `OBJECT_PROPERTY` |
| `RDFNodeType.literal(xsd:string)` | `STRING_PROPERTY`; frames get a `language_tag` column |
| Any other literal datatype | `NON_STRING_PROPERTY` |

## What the package does not do

- It does not parse stOTTR text. You build documents out of the `ottrmap.model`
  classes.
- It does not expand instances into triples.
- It does not read or write RDF files, so it has no N-Triples or other
  serialisation output. Stored triples are available only as the pandas frames
  returned by `Triplestore.tables()`.
- Everything is kept in memory. There is no on-disk cache and no query
  language.
- There is no command-line tool.