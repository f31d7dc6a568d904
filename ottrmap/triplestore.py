"""In-memory store of triples grouped by predicate and object type."""
from __future__ import annotations

import enum
import logging
import time
from dataclasses import dataclass, field
from typing import Iterator, Optional

import pandas as pd

from .resolver import XSD_PREFIX_IRI

logger = logging.getLogger(__name__)

LANGUAGE_TAG_COLUMN = "language_tag"
XSD_STRING = XSD_PREFIX_IRI + "string"


class TripleType(enum.Enum):
    OBJECT_PROPERTY = "object_property"
    STRING_PROPERTY = "string_property"
    NON_STRING_PROPERTY = "non_string_property"


@dataclass(frozen=True)
class RDFNodeType:
    """Type of the objects of a table: an IRI, or a literal with a datatype."""

    datatype: Optional[str] = None

    @classmethod
    def iri(cls) -> "RDFNodeType":
        return cls(None)

    @classmethod
    def literal(cls, datatype: str) -> "RDFNodeType":
        return cls(datatype)

    @property
    def is_iri(self) -> bool:
        return self.datatype is None

    def find_triple_type(self) -> TripleType:
        if self.datatype is None:
            return TripleType.OBJECT_PROPERTY
        if self.datatype == XSD_STRING:
            return TripleType.STRING_PROPERTY
        return TripleType.NON_STRING_PROPERTY


@dataclass
class TriplesToAdd:
    """Triples as a frame with subject, object and, without a static verb, verb columns."""

    df: pd.DataFrame
    object_type: RDFNodeType
    language_tag: Optional[str] = None
    static_verb_column: Optional[str] = None
    has_unique_subset: bool = False


@dataclass
class TripleDF:
    df: pd.DataFrame
    predicate: str
    object_type: RDFNodeType


@dataclass
class TripleTable:
    """Frames of triples sharing one predicate and one object type."""

    dfs: list = field(default_factory=list)
    unique: bool = True
    call_uuid: str = ""

    def __len__(self) -> int:
        return len(self.dfs)

    def frames(self) -> list:
        """The frames of the table."""
        return list(self.dfs)


def _prepare_triples_df(
    df: pd.DataFrame,
    predicate: str,
    object_type: RDFNodeType,
    language_tag: Optional[str],
    has_unique_subset: bool,
) -> Optional[TripleDF]:
    df = df.dropna()
    if len(df) == 0:
        return None
    if not has_unique_subset:
        df = df.drop_duplicates(keep="first")
    df = df.reset_index(drop=True)
    if object_type.datatype == XSD_STRING:
        df = df.assign(
            **{LANGUAGE_TAG_COLUMN: pd.Series([language_tag] * len(df), dtype=object)}
        )
    return TripleDF(df=df, predicate=predicate, object_type=object_type)


def prepare_triples(
    df: pd.DataFrame,
    object_type: RDFNodeType,
    language_tag: Optional[str],
    static_verb_column: Optional[str],
    has_unique_subset: bool,
) -> list:
    """Split ``df`` by predicate into cleaned frames ready to be stored."""
    started = time.perf_counter()
    if len(df) == 0:
        return []
    prepared = []
    if static_verb_column is not None:
        parts = [(static_verb_column, df[["subject", "object"]])]
    else:
        parts = []
        for verb, part in df.groupby("verb", sort=False, dropna=False):
            if not isinstance(verb, str):
                raise ValueError(f"Verb must be a string, got {verb!r}")
            parts.append((verb, part[["subject", "object"]]))
    for predicate, part in parts:
        triple_df = _prepare_triples_df(
            part, predicate, object_type, language_tag, has_unique_subset
        )
        if triple_df is not None:
            prepared.append(triple_df)
    logger.debug("Adding triples took %s seconds", time.perf_counter() - started)
    return prepared


class Triplestore:
    """Triples kept as frames, keyed by predicate and then by object type."""

    def __init__(self) -> None:
        self.deduplicated = True
        self._df_map: dict = {}

    def tables(self) -> Iterator[tuple]:
        """Yield ``(predicate, object_type, table)`` for every stored table."""
        for predicate, by_type in self._df_map.items():
            for object_type, table in by_type.items():
                yield predicate, object_type, table

    def deduplicate(self) -> None:
        """Merge the frames of every table that may hold duplicates."""
        started = time.perf_counter()
        for _, _, table in self.tables():
            if not table.unique:
                merged = pd.concat(table.dfs, ignore_index=True)
                table.dfs = [merged.drop_duplicates(keep="first").reset_index(drop=True)]
                table.unique = True
        self.deduplicated = True
        logger.debug("Deduplication took %s seconds", time.perf_counter() - started)

    def add_triples_vec(self, triples, call_uuid: str) -> None:
        """Prepare and store every batch of ``triples`` under one call id."""
        prepared = [
            triple_df
            for t in triples
            for triple_df in prepare_triples(
                t.df,
                t.object_type,
                t.language_tag,
                t.static_verb_column,
                t.has_unique_subset,
            )
        ]
        self._add_triple_dfs(prepared, call_uuid)

    def _add_triple_dfs(self, triple_dfs: list, call_uuid: str) -> None:
        for triple_df in triple_dfs:
            by_type = self._df_map.setdefault(triple_df.predicate, {})
            table = by_type.get(triple_df.object_type)
            if table is None:
                by_type[triple_df.object_type] = TripleTable(
                    dfs=[triple_df.df], unique=True, call_uuid=call_uuid
                )
                continue
            table.dfs.append(triple_df.df)
            table.unique = table.unique and call_uuid == table.call_uuid
            if not table.unique:
                self.deduplicated = False