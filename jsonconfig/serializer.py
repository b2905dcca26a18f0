"""Dialect-aware JSON serialization of config models.

Parsing and writing go through the standard ``json`` module, schema
validation and dumping through pydantic. This module applies the
``SerializerOptions`` switches around them: comments and trailing commas
are stripped before parsing only when the dialect allows each one.
"""

import collections.abc
import json
import math
import re
import types
from enum import Enum
from typing import Annotated, Any, Dict, Optional, Type, TypeVar, Union, get_args, get_origin

from pydantic import BaseModel
from pydantic_core import to_jsonable_python

from jsonconfig.exceptions import DialectError
from jsonconfig.options import SerializerOptions

ModelT = TypeVar("ModelT", bound=BaseModel)

NAMED_FLOATS = {"NaN": math.nan, "Infinity": math.inf, "-Infinity": -math.inf}

# Characters escaped when relaxed escaping is off, in addition to non-ASCII
HTML_SENSITIVE = {
    "<": "\\u003C",
    ">": "\\u003E",
    "&": "\\u0026",
    "'": "\\u0027",
    "`": "\\u0060",
}

_SEQUENCE_ORIGINS = (list, set, frozenset, collections.abc.Sequence, collections.abc.Set)
_MAPPING_ORIGINS = (dict, collections.abc.Mapping)


# A JSON string, or a comment
_COMMENT_RE = re.compile(r'"(?:[^"\\]|\\.)*"|//[^\n]*|/\*.*?\*/', re.DOTALL)
# A JSON string, or a comma followed only by whitespace and a closing bracket
_TRAILING_COMMA_RE = re.compile(r'"(?:[^"\\]|\\.)*"|,(?=\s*[\]}])')


def _reject_constant(name: str) -> float:
    raise DialectError(f"Bare literal '{name}' is not valid JSON, quote it as \"{name}\"")


def _strip_comments(text: str) -> str:
    return _COMMENT_RE.sub(lambda m: m.group() if m.group().startswith('"') else " ", text)


def _strip_trailing_commas(text: str) -> str:
    def replace(match):
        token = match.group()
        if token.startswith('"'):
            return token
        # "[," and ",," stay, so json still rejects empty elements
        if text[: match.start()].rstrip().endswith(("[", "{", ",")):
            return token
        return ""

    return _TRAILING_COMMA_RE.sub(replace, text)


def parse(text: str, dialect: SerializerOptions) -> Any:
    """Parse JSON text into plain Python values.

    Comments and trailing commas are removed first when the dialect allows
    them; everything else must be standard JSON.

    Raises:
        ValueError: If the text is not valid JSON for the dialect.
    """
    if dialect.skip_comments:
        text = _strip_comments(text)
    if dialect.allow_trailing_commas:
        text = _strip_trailing_commas(text)
    return json.loads(text, parse_constant=_reject_constant)


def deserialize(text: str, model_cls: Type[ModelT], dialect: SerializerOptions) -> Optional[ModelT]:
    """Parse ``text`` and validate it as ``model_cls``.

    A JSON ``null`` document yields ``None`` rather than an error.

    Raises:
        ValueError: Malformed JSON.
        DialectError: A value the dialect does not accept.
        pydantic.ValidationError: JSON incompatible with the model.
    """
    data = parse(text, dialect)
    if data is None:
        return None
    if isinstance(data, dict):
        data = _normalize_model(model_cls, data, dialect)
    return model_cls.model_validate(data)


def _normalize_model(model_cls: Type[BaseModel], data: Dict[str, Any], dialect: SerializerOptions) -> Dict[str, Any]:
    """Map JSON keys onto field keys and normalize each field value."""
    lookup = {}
    for name, field in model_cls.model_fields.items():
        key = field.alias or name
        lookup[key] = (key, field)
        lookup.setdefault(name, (key, field))
    folded = {k.lower(): v for k, v in lookup.items()} if dialect.case_insensitive else {}

    result = {}
    for key, value in data.items():
        match = lookup.get(key)
        if match is None and folded and isinstance(key, str):
            match = folded.get(key.lower())
        if match is None:
            # Unknown keys are left for pydantic, which ignores them by default
            result[key] = value
            continue
        canonical, field = match
        result[canonical] = _normalize(field.annotation, value, dialect)
    return result


def _normalize(annotation: Any, value: Any, dialect: SerializerOptions) -> Any:
    if value is None or annotation is None or annotation is Any:
        return value

    origin = get_origin(annotation)
    args = get_args(annotation)

    if origin is Annotated:
        return _normalize(args[0], value, dialect)
    if origin is Union or origin is types.UnionType:
        candidates = [arg for arg in args if arg is not type(None)]
        # Only unambiguous optionals are walked; other unions go to pydantic as-is
        if len(candidates) == 1:
            return _normalize(candidates[0], value, dialect)
        return value
    if origin in _SEQUENCE_ORIGINS and isinstance(value, list):
        item = args[0] if args else Any
        return [_normalize(item, v, dialect) for v in value]
    if origin is tuple and isinstance(value, list):
        if len(args) == 2 and args[1] is Ellipsis:
            return [_normalize(args[0], v, dialect) for v in value]
        if len(args) == len(value):
            return [_normalize(a, v, dialect) for a, v in zip(args, value)]
        return value
    if origin in _MAPPING_ORIGINS and isinstance(value, dict):
        item = args[1] if len(args) == 2 else Any
        return {k: _normalize(item, v, dialect) for k, v in value.items()}

    if not isinstance(annotation, type):
        return value
    if issubclass(annotation, BaseModel) and isinstance(value, dict):
        return _normalize_model(annotation, value, dialect)
    if issubclass(annotation, Enum):
        return _enum_member(annotation, value, dialect)
    if annotation is int or annotation is float:
        return _number(annotation, value, dialect)
    return value


def _enum_member(enum_cls: Type[Enum], value: Any, dialect: SerializerOptions) -> Any:
    if not (dialect.enum_as_string and isinstance(value, str)):
        return value
    member = enum_cls.__members__.get(value)
    if member is None:
        lowered = value.lower()
        for name, candidate in enum_cls.__members__.items():
            if name.lower() == lowered:
                member = candidate
                break
    # Not a member name: may still be a valid value of a str-valued enum
    return member if member is not None else value


def _number(annotation: type, value: Any, dialect: SerializerOptions) -> Any:
    if not isinstance(value, str):
        return value
    if annotation is float and value in NAMED_FLOATS:
        if not dialect.named_float_literals:
            raise DialectError(f"Named floating point literal '{value}' is not allowed")
        return NAMED_FLOATS[value]
    if not dialect.numbers_from_string:
        raise DialectError(f"Quoted number {value!r} is not allowed")
    return value


def serialize(instance: BaseModel, dialect: SerializerOptions) -> str:
    """Serialize the fields of ``instance`` to JSON text.

    Raises:
        ValueError: A non-finite float while named literals are disabled.
        pydantic_core.PydanticSerializationError: A value with no JSON form.
    """
    data = _jsonable(instance.model_dump(by_alias=True), dialect)
    if dialect.write_indented:
        text = json.dumps(
            data,
            indent=dialect.indent,
            ensure_ascii=not dialect.relaxed_escaping,
            allow_nan=False,
            default=to_jsonable_python,
        )
    else:
        text = json.dumps(
            data,
            separators=(",", ":"),
            ensure_ascii=not dialect.relaxed_escaping,
            allow_nan=False,
            default=to_jsonable_python,
        )
    if not dialect.relaxed_escaping:
        # These characters only occur inside JSON strings
        for char, escaped in HTML_SENSITIVE.items():
            text = text.replace(char, escaped)
    return text


def _jsonable(value: Any, dialect: SerializerOptions) -> Any:
    if isinstance(value, Enum):
        return value.name if dialect.enum_as_string else _jsonable(value.value, dialect)
    if isinstance(value, float):
        if not math.isfinite(value) and dialect.named_float_literals:
            if math.isnan(value):
                return "NaN"
            return "Infinity" if value > 0 else "-Infinity"
        return value
    if isinstance(value, dict):
        return {_jsonable(k, dialect): _jsonable(v, dialect) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_jsonable(v, dialect) for v in value]
    return value
