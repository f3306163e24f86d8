"""
This module contains the crate graph model: crates, their compilation metadata and the dependencies linking them.
"""
from __future__ import annotations

import enum
from typing import (
    Dict,
    Iterable,
    Iterator,
    List,
    NewType,
    Optional,
    Set,
    Tuple,
)

import attr as attrs

from .shared import is_valid_crate_name, normalize_dashes
from .exceptions import (
    InvalidCrateName,
    UnknownCrateError,
    CyclicDependenciesError,
    DuplicateDependencyError,
)

FileId = NewType('FileId', int)
CrateId = NewType('CrateId', int)

class Edition(enum.Enum):
    """
    Language edition of a crate. The value is the canonical text form.
    """
    EDITION_2015 = '2015'
    EDITION_2018 = '2018'
    EDITION_2021 = '2021'

    # alias of the latest edition, used as default
    CURRENT = '2021'

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, text: str) -> 'Edition':
        """
        Parse the canonical text form of an edition.

        :raises ValueError: If the text is not a known edition.
        """
        return cls(text)

@attrs.s(auto_attribs=True, frozen=True, str=False)
class CfgAtom:
    """
    A single configuration predicate: either a flag like ``test``
    or a key-value pair like ``feature="std"``.
    """
    key: str
    value: Optional[str] = None

    def __str__(self) -> str:
        if self.value is None:
            return self.key
        return f'{self.key}="{self.value}"'

class CfgOptions:
    """
    The set of active configuration predicates of a crate.
    Insertion order is kept but equality only considers membership.
    """

    def __init__(self, atoms: Iterable[CfgAtom] = ()) -> None:
        self._atoms: Dict[CfgAtom, None] = dict.fromkeys(atoms)

    def insert_atom(self, key: str) -> None:
        self._atoms[CfgAtom(key)] = None

    def insert_key_value(self, key: str, value: str) -> None:
        self._atoms[CfgAtom(key, value)] = None

    def get_cfg_keys(self) -> List[str]:
        return list(dict.fromkeys(atom.key for atom in self._atoms))

    def get_cfg_values(self, key: str) -> List[str]:
        return [atom.value for atom in self._atoms
                if atom.key == key and atom.value is not None]

    def is_flag(self, key: str) -> bool:
        return CfgAtom(key) in self._atoms

    def __contains__(self, atom: object) -> bool:
        return atom in self._atoms

    def __iter__(self) -> Iterator[CfgAtom]:
        return iter(self._atoms)

    def __len__(self) -> int:
        return len(self._atoms)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CfgOptions):
            return NotImplemented
        return self._atoms.keys() == other._atoms.keys()

    def __repr__(self) -> str:
        return f"CfgOptions([{', '.join(str(a) for a in self._atoms)}])"

class Env:
    """
    Environment variables of a crate. Setting a variable twice keeps the last value.
    """

    def __init__(self, entries: Iterable[Tuple[str, str]] = ()) -> None:
        self._entries: Dict[str, str] = {}
        for key, value in entries:
            self.set(key, value)

    def set(self, key: str, value: str) -> None:
        self._entries[key] = value

    def get(self, key: str) -> Optional[str]:
        return self._entries.get(key)

    def __iter__(self) -> Iterator[Tuple[str, str]]:
        return iter(self._entries.items())

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Env):
            return NotImplemented
        return self._entries == other._entries

    def __repr__(self) -> str:
        return f"Env({self._entries!r})"

@attrs.s(auto_attribs=True, frozen=True, str=False)
class CrateName:
    """
    The name by which a crate refers to one of its dependencies.
    Use `CrateName.new` to create a validated name.
    """
    text: str

    @classmethod
    def new(cls, text: str) -> 'CrateName':
        """
        :raises InvalidCrateName: If the text is empty or not identifier-like.
        """
        if not is_valid_crate_name(text):
            raise InvalidCrateName(text)
        return cls(text)

    @classmethod
    def normalize_dashes(cls, text: str) -> 'CrateName':
        """
        Like `new` but first replaces dashes with underscores.
        """
        return cls.new(normalize_dashes(text))

    def __str__(self) -> str:
        return self.text

@attrs.s(auto_attribs=True, frozen=True)
class Dependency:
    crate_id: CrateId
    name: CrateName

@attrs.s(auto_attribs=True)
class CrateData:
    root_file_id: FileId
    edition: Edition
    display_name: Optional[str]
    cfg_options: CfgOptions
    potential_cfg_options: CfgOptions
    env: Env
    dependencies: List[Dependency] = attrs.Factory(list)
    # reserved, no procedural macro metadata is modeled
    proc_macro: List[str] = attrs.Factory(list)

class CrateGraph:
    """
    A directed acyclic graph of crates. Crates are identified by
    sequential `CrateId` starting at zero, in the order they were added.
    """

    def __init__(self) -> None:
        self._arena: Dict[CrateId, CrateData] = {}

    def add_crate_root(
        self,
        file_id: FileId,
        edition: Edition,
        display_name: Optional[str],
        cfg_options: CfgOptions,
        potential_cfg_options: CfgOptions,
        env: Env,
        proc_macro: Iterable[str] = (),
    ) -> CrateId:
        crate_id = CrateId(len(self._arena))
        self._arena[crate_id] = CrateData(
            root_file_id=file_id,
            edition=edition,
            display_name=display_name,
            cfg_options=cfg_options,
            potential_cfg_options=potential_cfg_options,
            env=env,
            proc_macro=list(proc_macro),
        )
        return crate_id

    def add_dep(self, from_: CrateId, dep: Dependency) -> None:
        """
        Make crate ``from_`` depend on ``dep.crate_id`` under the name ``dep.name``.
        The graph is left untouched when the dependency is rejected.

        :raises UnknownCrateError: If one of the crates is not in the graph.
        :raises CyclicDependenciesError: If the dependency would introduce a cycle.
        :raises DuplicateDependencyError: If ``from_`` already has a dependency with that name.
        """
        for crate_id in (from_, dep.crate_id):
            if crate_id not in self._arena:
                raise UnknownCrateError(crate_id, 'not in the graph')

        path = self._find_path(dep.crate_id, from_)
        if path is not None:
            raise CyclicDependenciesError(from_, dep=dep, path=(from_, *path))

        for existing in self._arena[from_].dependencies:
            if existing.name == dep.name:
                raise DuplicateDependencyError(from_, dep=dep, existing=existing)

        self._arena[from_].dependencies.append(dep)

    def _find_path(self, start: CrateId, target: CrateId) -> Optional[List[CrateId]]:
        # depth-first search, returns the crates from start to target inclusive.
        parents: Dict[CrateId, Optional[CrateId]] = {start: None}
        stack = [start]
        while stack:
            crate_id = stack.pop()
            if crate_id == target:
                path: List[CrateId] = []
                node: Optional[CrateId] = crate_id
                while node is not None:
                    path.append(node)
                    node = parents[node]
                path.reverse()
                return path
            for dep in self._arena[crate_id].dependencies:
                if dep.crate_id not in parents:
                    parents[dep.crate_id] = crate_id
                    stack.append(dep.crate_id)
        return None

    def __iter__(self) -> Iterator[CrateId]:
        return iter(self._arena)

    def __getitem__(self, crate_id: CrateId) -> CrateData:
        try:
            return self._arena[crate_id]
        except KeyError:
            raise UnknownCrateError(crate_id, 'not in the graph') from None

    def __contains__(self, crate_id: object) -> bool:
        return crate_id in self._arena

    def __len__(self) -> int:
        return len(self._arena)

    def items(self) -> Iterator[Tuple[CrateId, CrateData]]:
        return iter(self._arena.items())

    def is_empty(self) -> bool:
        return not self._arena

    def crate_id_for_crate_root(self, file_id: FileId) -> Optional[CrateId]:
        for crate_id, data in self._arena.items():
            if data.root_file_id == file_id:
                return crate_id
        return None

    def transitive_deps(self, of: CrateId) -> Set[CrateId]:
        """
        All crates reachable from ``of``, including itself.
        """
        if of not in self._arena:
            raise UnknownCrateError(of, 'not in the graph')
        seen: Set[CrateId] = {of}
        stack = [of]
        while stack:
            for dep in self._arena[stack.pop()].dependencies:
                if dep.crate_id not in seen:
                    seen.add(dep.crate_id)
                    stack.append(dep.crate_id)
        return seen

    def crates_in_topological_order(self) -> List[CrateId]:
        """
        All crates, each one listed after all of its dependencies.
        """
        result: List[CrateId] = []
        visited: Set[CrateId] = set()
        for root in self._arena:
            if root in visited:
                continue
            visited.add(root)
            stack = [(root, iter(self._arena[root].dependencies))]
            while stack:
                crate_id, deps = stack[-1]
                for dep in deps:
                    if dep.crate_id not in visited:
                        visited.add(dep.crate_id)
                        stack.append((dep.crate_id,
                                      iter(self._arena[dep.crate_id].dependencies)))
                        break
                else:
                    stack.pop()
                    result.append(crate_id)
        return result

    def __repr__(self) -> str:
        return f"<CrateGraph({len(self._arena)} crates)>"
