"""
Serializable model of a crate graph, and its structural (de)serialization.

The document only contains plain values: crates are refered to by their slot,
an integer meaningful only within one document.

JSON shape::

    {"crates": [[slot, {"root_file_id": int, "edition": str,
                        "display_name": str|null,
                        "cfg_options": {"options": [[key, [value, ...]], ...]},
                        "potential_cfg_options": {"options": [...]},
                        "env": {"env": [[key, value], ...]},
                        "proc_macro": []}], ...],
     "deps": [{"from": slot, "name": str, "to": slot}, ...]}
"""
from __future__ import annotations

import json
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

import attr as attrs
from attrs import validators

from .exceptions import DocumentFormatError

_U32_MAX = 2 ** 32 - 1

# validators

def _not_bool(inst: object, attr: 'attrs.Attribute[Any]', value: Any) -> None:
    if isinstance(value, bool):
        raise TypeError(f"'{attr.name}' must be an integer, not a bool", attr, int, value)

_u32_range = validators.and_(validators.instance_of(int), _not_bool,
                             validators.ge(0), validators.le(_U32_MAX))

def _u32(inst: object, attr: 'attrs.Attribute[Any]', value: Any) -> None:
    try:
        _u32_range(inst, attr, value)
    except ValueError as e:
        # range validators don't tell which attribute failed
        raise ValueError(*e.args, attr) from None

def _pair(first: Callable[..., None], second: Callable[..., None]) -> Callable[..., None]:
    def validate(inst: object, attr: 'attrs.Attribute[Any]', value: Any) -> None:
        if not isinstance(value, tuple):
            raise TypeError(f"'{attr.name}' items must be pairs", attr, tuple, value)
        if len(value) != 2:
            raise ValueError(f"expected a pair, got {len(value)} items", attr)
        first(inst, attr, value[0])
        second(inst, attr, value[1])
    return validate

def _tuple_of(member: Callable[..., None]) -> Callable[..., None]:
    return validators.deep_iterable(member_validator=member,
                                    iterable_validator=validators.instance_of(tuple))

_str = validators.instance_of(str)

def _frozen(depth: int) -> Callable[[Any], Any]:
    """
    Converter turning nested lists into tuples, down to the given depth.
    Anything else is left as is, for the validators to reject.
    """
    def convert(value: Any) -> Any:
        if depth > 0 and isinstance(value, (list, tuple)):
            inner = _frozen(depth - 1)
            return tuple(inner(v) for v in value)
        return value
    return convert

# structural helpers

_WIRE_NAMES = {'from_': 'from'}

def _json_type_name(expected: object) -> str:
    if expected is int:
        return 'unsigned 32-bit integer'
    if expected is str:
        return 'string'
    if expected in (tuple, list):
        return 'array'
    if expected is dict or (isinstance(expected, type) and attrs.has(expected)):
        return 'object'
    return getattr(expected, '__name__', str(expected))

def _join(path: str, key: str) -> str:
    return f'{path}.{key}' if path else key

def _format_error(e: Exception, path: str) -> DocumentFormatError:
    args = e.args
    if len(args) > 1 and isinstance(args[1], attrs.Attribute):
        name = args[1].name
        path = _join(path, _WIRE_NAMES.get(name, name))
        if len(args) == 4:
            return DocumentFormatError(path, expected=_json_type_name(args[2]), value=args[3])
    return DocumentFormatError(path, str(args[0]) if args else repr(e))

def _build(cls: Any, path: str, **fields: Any) -> Any:
    """
    Create a wire object, reporting validation failures as `DocumentFormatError`.
    """
    try:
        return cls(**fields)
    except (TypeError, ValueError) as e:
        raise _format_error(e, path) from e

def _field(obj: Mapping[str, Any], key: str, path: str) -> Any:
    try:
        return obj[key]
    except KeyError:
        raise DocumentFormatError(_join(path, key), 'missing field') from None

def _as_dict(value: Any, path: str) -> Mapping[str, Any]:
    if not isinstance(value, dict):
        raise DocumentFormatError(path, expected='object', value=value)
    return value

# wire types

@attrs.s(auto_attribs=True, frozen=True)
class CfgOptionsJson:
    options: Tuple[Tuple[str, Tuple[str, ...]], ...] = attrs.ib(
        default=(), converter=_frozen(3),
        validator=_tuple_of(_pair(_str, _tuple_of(_str))))

    def to_dict(self) -> Dict[str, Any]:
        return {'options': [[key, list(values)] for key, values in self.options]}

    @classmethod
    def from_dict(cls, obj: Any, path: str = '') -> 'CfgOptionsJson':
        obj = _as_dict(obj, path)
        return _build(cls, path, options=_field(obj, 'options', path))

@attrs.s(auto_attribs=True, frozen=True)
class EnvJson:
    env: Tuple[Tuple[str, str], ...] = attrs.ib(
        default=(), converter=_frozen(2), validator=_tuple_of(_pair(_str, _str)))

    def to_dict(self) -> Dict[str, Any]:
        return {'env': [[key, value] for key, value in self.env]}

    @classmethod
    def from_dict(cls, obj: Any, path: str = '') -> 'EnvJson':
        obj = _as_dict(obj, path)
        return _build(cls, path, env=_field(obj, 'env', path))

@attrs.s(auto_attribs=True, frozen=True)
class CrateDataJson:
    root_file_id: int = attrs.ib(validator=_u32)
    # None when absent from the document
    edition: Optional[str] = attrs.ib(default=None, validator=validators.optional(_str))
    display_name: Optional[str] = attrs.ib(default=None, validator=validators.optional(_str))
    cfg_options: CfgOptionsJson = attrs.ib(
        factory=CfgOptionsJson, validator=validators.instance_of(CfgOptionsJson))
    potential_cfg_options: CfgOptionsJson = attrs.ib(
        factory=CfgOptionsJson, validator=validators.instance_of(CfgOptionsJson))
    env: EnvJson = attrs.ib(factory=EnvJson, validator=validators.instance_of(EnvJson))
    proc_macro: Tuple[str, ...] = attrs.ib(
        default=(), converter=_frozen(1), validator=_tuple_of(_str))

    def to_dict(self) -> Dict[str, Any]:
        return {
            'root_file_id': self.root_file_id,
            'edition': self.edition,
            'display_name': self.display_name,
            'cfg_options': self.cfg_options.to_dict(),
            'potential_cfg_options': self.potential_cfg_options.to_dict(),
            'env': self.env.to_dict(),
            'proc_macro': list(self.proc_macro),
        }

    @classmethod
    def from_dict(cls, obj: Any, path: str = '') -> 'CrateDataJson':
        obj = _as_dict(obj, path)
        return _build(cls, path,
            root_file_id=_field(obj, 'root_file_id', path),
            edition=obj.get('edition'),
            display_name=obj.get('display_name'),
            cfg_options=CfgOptionsJson.from_dict(
                _field(obj, 'cfg_options', path), _join(path, 'cfg_options')),
            potential_cfg_options=CfgOptionsJson.from_dict(
                _field(obj, 'potential_cfg_options', path),
                _join(path, 'potential_cfg_options')),
            env=EnvJson.from_dict(_field(obj, 'env', path), _join(path, 'env')),
            proc_macro=obj.get('proc_macro', ()),
        )

@attrs.s(auto_attribs=True, frozen=True)
class DepJson:
    from_: int = attrs.ib(validator=_u32)
    name: str = attrs.ib(validator=_str)
    to: int = attrs.ib(validator=_u32)

    def to_dict(self) -> Dict[str, Any]:
        return {'from': self.from_, 'name': self.name, 'to': self.to}

    @classmethod
    def from_dict(cls, obj: Any, path: str = '') -> 'DepJson':
        obj = _as_dict(obj, path)
        return _build(cls, path,
            from_=_field(obj, 'from', path),
            name=_field(obj, 'name', path),
            to=_field(obj, 'to', path),
        )

def _crate_entry(item: Any, path: str) -> Any:
    # only well formed [slot, data] pairs get their data decoded
    if isinstance(item, (list, tuple)) and len(item) == 2:
        return (item[0], CrateDataJson.from_dict(item[1], f'{path}[1]'))
    return item

@attrs.s(auto_attribs=True, frozen=True)
class CrateGraphJson:
    """
    A self-contained, immutable document describing a crate graph.
    """
    crates: Tuple[Tuple[int, CrateDataJson], ...] = attrs.ib(
        default=(), converter=_frozen(2),
        validator=_tuple_of(_pair(_u32, validators.instance_of(CrateDataJson))))
    deps: Tuple[DepJson, ...] = attrs.ib(
        default=(), converter=_frozen(1),
        validator=_tuple_of(validators.instance_of(DepJson)))

    def to_dict(self) -> Dict[str, Any]:
        return {
            'crates': [[slot, data.to_dict()] for slot, data in self.crates],
            'deps': [dep.to_dict() for dep in self.deps],
        }

    @classmethod
    def from_dict(cls, obj: Any) -> 'CrateGraphJson':
        """
        Build a document from plain objects, as returned by `json.loads`.

        :raises DocumentFormatError: If a field is missing or has the wrong type.
        """
        obj = _as_dict(obj, '')
        crates = _field(obj, 'crates', '')
        if isinstance(crates, list):
            crates = [_crate_entry(item, f'crates[{i}]') for i, item in enumerate(crates)]
        deps = _field(obj, 'deps', '')
        if isinstance(deps, list):
            deps = [DepJson.from_dict(dep, f'deps[{i}]') for i, dep in enumerate(deps)]
        return _build(cls, '', crates=crates, deps=deps)

def dumps(doc: CrateGraphJson, indent: Optional[int] = None) -> str:
    return json.dumps(doc.to_dict(), indent=indent)

def loads(text: str) -> CrateGraphJson:
    """
    :raises DocumentFormatError: If the text is not valid JSON or the document is malformed.
    """
    try:
        obj = json.loads(text)
    except (json.JSONDecodeError, RecursionError) as e:
        raise DocumentFormatError('', f'not valid JSON: {e}') from e
    return CrateGraphJson.from_dict(obj)
