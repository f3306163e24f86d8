"""
Conversion between `CrateGraph` and its serializable document, `CrateGraphJson`.

>>> from crategraph import CrateGraph, CfgOptions, Env, Edition, FileId, CrateName, Dependency
>>> graph = CrateGraph()
>>> a = graph.add_crate_root(FileId(1), Edition.EDITION_2018, 'a', CfgOptions(), CfgOptions(), Env())
>>> b = graph.add_crate_root(FileId(2), Edition.EDITION_2018, 'b', CfgOptions(), CfgOptions(), Env())
>>> graph.add_dep(a, Dependency(b, CrateName.new('b')))
>>> doc = encode(graph)
>>> doc.deps
(DepJson(from_=0, name='b', to=1),)
>>> decode(doc)[0].dependencies
[Dependency(crate_id=1, name=CrateName(text='b'))]
"""
from __future__ import annotations

import sys
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, TextIO

import attr as attrs

from . import serial
from .exceptions import CrateGraphException, UnknownSlotError
from .model import (
    CfgOptions,
    CrateData,
    CrateGraph,
    CrateId,
    CrateName,
    Dependency,
    Edition,
    Env,
    FileId,
)
from .serial import CfgOptionsJson, CrateDataJson, CrateGraphJson, DepJson, EnvJson


@dataclass(frozen=True)
class Options:
    outstream: TextIO = sys.stdout
    verbosity: int = 0
    indent: Optional[int] = None


@attrs.s(auto_attribs=True, frozen=True)
class SkippedDependency:
    """
    A dependency of the document that could not be added to the decoded graph.
    """
    dep: DepJson
    error: CrateGraphException


@attrs.s(auto_attribs=True, frozen=True)
class DecodeResult:
    graph: CrateGraph
    skipped: List[SkippedDependency] = attrs.Factory(list)


def _encode_cfg(cfg_options: CfgOptions) -> CfgOptionsJson:
    options = []
    for key in cfg_options.get_cfg_keys():
        # a flag is a key without values
        if cfg_options.is_flag(key):
            options.append((key, ()))
        values = cfg_options.get_cfg_values(key)
        if values:
            options.append((key, tuple(values)))
    return CfgOptionsJson(tuple(options))

def _decode_cfg(cfg_json: CfgOptionsJson) -> CfgOptions:
    cfg_options = CfgOptions()
    for key, values in cfg_json.options:
        if not values:
            cfg_options.insert_atom(key)
        for value in values:
            cfg_options.insert_key_value(key, value)
    return cfg_options

def _encode_env(env: Env) -> EnvJson:
    return EnvJson(tuple(env))

def _decode_env(env_json: EnvJson) -> Env:
    return Env(env_json.env)

def _encode_crate_data(data: CrateData) -> CrateDataJson:
    return CrateDataJson(
        root_file_id=data.root_file_id,
        edition=str(data.edition),
        display_name=data.display_name,
        cfg_options=_encode_cfg(data.cfg_options),
        potential_cfg_options=_encode_cfg(data.potential_cfg_options),
        env=_encode_env(data.env),
        proc_macro=(),
    )


class Codec:
    """
    Encodes crate graphs to documents and decodes them back.

    Encoding never fails. Decoding never fails on semantic anomalies: dependencies
    with an invalid name, an unknown slot, or that the graph rejects are dropped,
    see `decode_with_report` to know which ones.
    """

    def __init__(self, **kw: Any) -> None:
        """
        :param kw: All parameters are passed to `Options` constructor.
        """
        self.options = Options(**kw)

    def msg(self, msg: str, thresh: int = 0) -> None:
        """
        Log a message.
        """
        if self.options.verbosity < thresh:
            return
        print(msg, file=self.options.outstream)

    # encoding

    def encode(self, graph: CrateGraph) -> CrateGraphJson:
        """
        Create the document for this graph. Crates are sorted by identifier,
        dependencies are listed crate by crate, in the order they were added.
        """
        t0 = time.time()
        crates = []
        deps: List[DepJson] = []
        for crate_id in graph:
            data = graph[crate_id]
            deps.extend(DepJson(crate_id, str(dep.name), dep.crate_id)
                        for dep in data.dependencies)
            crates.append((crate_id, _encode_crate_data(data)))
        crates.sort(key=lambda item: item[0])

        t1 = time.time()
        self.msg(f"encoding {len(crates)} crates took {t1-t0} seconds", thresh=2)
        return CrateGraphJson(tuple(crates), tuple(deps))

    def dumps(self, graph: CrateGraph) -> str:
        return serial.dumps(self.encode(graph), indent=self.options.indent)

    # decoding

    def _decode_edition(self, text: Optional[str]) -> Edition:
        if text is None:
            return Edition.CURRENT
        try:
            return Edition.parse(text)
        except ValueError:
            self.msg(f"unknown edition {text!r}, using {Edition.CURRENT}", thresh=1)
            return Edition.CURRENT

    def _add_crate(self, graph: CrateGraph, data: CrateDataJson) -> CrateId:
        return graph.add_crate_root(
            FileId(data.root_file_id),
            self._decode_edition(data.edition),
            data.display_name,
            _decode_cfg(data.cfg_options),
            _decode_cfg(data.potential_cfg_options),
            _decode_env(data.env),
        )

    @staticmethod
    def _resolve(slots: Dict[int, CrateId], slot: int) -> CrateId:
        try:
            return slots[slot]
        except KeyError:
            raise UnknownSlotError(slot, 'no crate has this slot in the document') from None

    def _add_dep(self, graph: CrateGraph, slots: Dict[int, CrateId], dep: DepJson) -> None:
        name = CrateName.new(dep.name)
        from_ = self._resolve(slots, dep.from_)
        to = self._resolve(slots, dep.to)
        graph.add_dep(from_, Dependency(to, name))

    def decode_with_report(self, doc: CrateGraphJson) -> DecodeResult:
        """
        Build a new graph from the document, and report the dependencies that were dropped.

        Crates are created in document order and get fresh identifiers;
        slots are only used to resolve the dependencies. When a slot appears twice,
        the first crate owns it.
        """
        t0 = time.time()
        graph = CrateGraph()
        slots: Dict[int, CrateId] = {}
        for slot, data in doc.crates:
            crate_id = self._add_crate(graph, data)
            if slot in slots:
                self.msg(f"duplicate slot {slot}: crate #{crate_id} "
                         "can't be used as a dependency endpoint", thresh=1)
            else:
                slots[slot] = crate_id

        skipped: List[SkippedDependency] = []
        for dep in doc.deps:
            try:
                self._add_dep(graph, slots, dep)
            except CrateGraphException as e:
                skipped.append(SkippedDependency(dep, e))
                self.msg(f"skipping dependency {dep.name!r} from slot {dep.from_} "
                         f"to slot {dep.to}: {e}", thresh=1)

        t1 = time.time()
        self.msg(f"decoding {len(graph)} crates took {t1-t0} seconds", thresh=2)
        return DecodeResult(graph, skipped)

    def decode(self, doc: CrateGraphJson) -> CrateGraph:
        """
        Build a new graph from the document, silently dropping invalid dependencies.
        """
        return self.decode_with_report(doc).graph

    def loads(self, text: str) -> CrateGraph:
        """
        :raises DocumentFormatError: If the text is not a well formed document.
        """
        return self.decode(serial.loads(text))


def encode(graph: CrateGraph) -> CrateGraphJson:
    return Codec().encode(graph)

def decode(doc: CrateGraphJson) -> CrateGraph:
    return Codec().decode(doc)

def dumps(graph: CrateGraph, indent: Optional[int] = None) -> str:
    return Codec(indent=indent).dumps(graph)

def loads(text: str) -> CrateGraph:
    return Codec().loads(text)
