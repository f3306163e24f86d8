"""
Lossless-when-possible, never-failing codec between a crate graph and a flat, text-serializable document.

The model
=========

A `CrateGraph` is a directed acyclic graph of crates. Each crate carries its compilation 
metadata (`CrateData`): the identifier of its root file, its `Edition`, an optional display name, 
the active and potential configuration predicates (`CfgOptions`) and its environment variables (`Env`).
Each edge is a `Dependency`: the crate it points to and the `CrateName` under which it's known.

Crates are identified by sequential `CrateId` that are meaningful only for one graph instance. 
In a document (`CrateGraphJson`), crates are identified by their *slot* instead, 
an integer meaningful only within this document.

How to use the library
======================

- ``encode(graph)`` creates the document, ``decode(doc)`` creates a new graph from it.
- ``dumps(graph)`` and ``loads(text)`` do the same with JSON text.
- Use a `Codec` instance to pass options, or to get the list of dependencies 
  that were dropped while decoding with `Codec.decode_with_report`.

Decoding is permissive: dependencies with an invalid name, referring to an unknown slot, 
or that the graph refuses (because they would introduce a cycle or reuse a name) are dropped. 
Only a malformed document (missing fields, wrong types) raises `DocumentFormatError`.
"""

from ._lib.model import (FileId, CrateId, Edition, CfgAtom, CfgOptions, Env, 
                         CrateName, Dependency, CrateData, CrateGraph)
from ._lib.serial import CrateGraphJson, CrateDataJson, CfgOptionsJson, EnvJson, DepJson
from ._lib.codec import (Options, Codec, DecodeResult, SkippedDependency, 
                         encode, decode, dumps, loads)
from ._lib.shared import is_valid_crate_name
from ._lib.exceptions import *

__all__ = (

    "encode",
    "decode",
    "dumps",
    "loads",
    "Codec",
    "Options",
    "DecodeResult",
    "SkippedDependency",

    "FileId",
    "CrateId",
    "Edition",
    "CfgAtom",
    "CfgOptions",
    "Env",
    "CrateName",
    "Dependency",
    "CrateData",
    "CrateGraph",
    "is_valid_crate_name",

    "CrateGraphJson",
    "CrateDataJson",
    "CfgOptionsJson",
    "EnvJson",
    "DepJson",

    "CrateGraphException",
    "InvalidCrateName",
    "UnknownCrateError",
    "UnknownSlotError",
    "CyclicDependenciesError",
    "DuplicateDependencyError",
    "DocumentFormatError",
)
