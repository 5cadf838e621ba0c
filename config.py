"""
This module defines the data structures for the shorthand configuration.
Stack and resource declarations are classified once into tagged variants
so the serializer never inspects raw shapes itself.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Mapping, Union

LiteralResolver = Callable[[Any], Any]


def display_name(value: Any) -> str:
    """Plain name of a key; keyword-style tokens lose their leading ':'."""
    text = str(value)
    return text[1:] if text.startswith(":") else text


@dataclass(frozen=True)
class LiteralContext:
    environment: Any
    parameters: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "parameters", MappingProxyType(dict(self.parameters)))


@dataclass(frozen=True)
class UrlStack:
    url: Any
    options: Any


@dataclass(frozen=True)
class InlineStack:
    options: Any


@dataclass(frozen=True)
class TupleResource:
    type_key: str
    properties: Any


@dataclass(frozen=True)
class ExplicitResource:
    declaration: Any


StackDeclaration = Union[UrlStack, InlineStack]
ResourceDeclaration = Union[TupleResource, ExplicitResource]


def _is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def stack_declaration(value: Any) -> StackDeclaration:
    if _is_sequence(value):
        url = value[0] if len(value) > 0 else None
        options = value[1] if len(value) > 1 else None
        if options is None:
            options = {}
        elif isinstance(options, Mapping):
            options = dict(options)
        return UrlStack(url=url, options=options)
    return InlineStack(options=value)


def resource_declaration(value: Any) -> ResourceDeclaration:
    # Anything that is not a sequence passes through untouched, valid or not.
    if _is_sequence(value):
        type_key = value[0] if len(value) > 0 else None
        properties = value[1] if len(value) > 1 else None
        return TupleResource(type_key=type_key, properties=properties)
    return ExplicitResource(declaration=value)
