"""Capabilities the purger expects from discovered resources.

Only `remove()` is mandatory. Every other behaviour is a separate protocol
that is probed per resource with isinstance().
"""
from typing import Any, Callable, Dict, List, Protocol, runtime_checkable

import boto3

from awspurge.core.config import FeatureFlags


@runtime_checkable
class Resource(Protocol):
    def remove(self) -> None:
        ...


@runtime_checkable
class Filterable(Protocol):
    def filter(self) -> None:
        """Raise to mark the resource as not eligible for deletion."""
        ...


@runtime_checkable
class PropertyGetter(Protocol):
    def properties(self) -> Dict[str, str]:
        ...


@runtime_checkable
class Equaler(Protocol):
    def equals(self, other: Any) -> bool:
        ...


@runtime_checkable
class FeatureFlagGetter(Protocol):
    def feature_flags(self, flags: FeatureFlags) -> None:
        ...


Lister = Callable[[boto3.session.Session], List[Resource]]


def tags_to_properties(tags, key_field='Key', value_field='Value') -> Dict[str, str]:
    """Turn an AWS tag list into `tag:<key>` properties."""
    return {f"tag:{t[key_field]}": t[value_field] for t in tags or []}


def isoformat(value) -> str:
    return value.isoformat() if hasattr(value, 'isoformat') else str(value or '')
