"""Resolve and type-check stOTTR templates and keep RDF triples in pandas data frames."""

__version__ = "0.1.0"