"""Unit of work of a purge run and the ordered queue holding them."""
import enum
import logging
from typing import Any, Dict, List

from awspurge.core.errors import PropertyError
from awspurge.resources.base import Equaler, PropertyGetter, Resource, Lister


class ItemState(enum.Enum):
    NEW = 'new'
    FILTERED = 'filtered'
    PENDING = 'pending'
    WAITING = 'waiting'
    FAILED = 'failed'
    FINISHED = 'finished'


TERMINAL_STATES = (ItemState.FILTERED, ItemState.FINISHED)

_STATUS = {
    ItemState.NEW: 'would remove',
    ItemState.PENDING: 'triggered remove',
    ItemState.WAITING: 'waiting',
    ItemState.FAILED: 'failed',
    ItemState.FILTERED: 'filtered',
    ItemState.FINISHED: 'removed',
}


def _has_own_str(obj: Any) -> bool:
    return type(obj).__str__ is not object.__str__


class Item:
    """One discovered resource instance and its lifecycle state."""

    def __init__(self, resource: Resource, region, resource_type: str, lister: Lister):
        self.resource = resource
        self.region = region
        self.type = resource_type
        self.lister = lister
        self.state = ItemState.NEW
        self.reason = ''

    def __repr__(self):
        return f"Item({self.region.name}, {self.type}, {self.resource}, {self.state.name})"

    def list(self) -> List[Resource]:
        """Fetch the current remote instances of this item's type and region."""
        return self.lister(self.region.session(self.type))

    def equals(self, other: Any) -> bool:
        if type(other) is not type(self.resource):
            return False
        if isinstance(self.resource, Equaler):
            return self.resource.equals(other)
        if _has_own_str(self.resource):
            return str(self.resource) == str(other)
        if isinstance(self.resource, PropertyGetter):
            return self.resource.properties() == other.properties()
        return self.resource is other

    def get_property(self, name: str) -> str:
        """Look up a filterable property; the empty name means the resource string."""
        if name == '':
            return str(self.resource)
        if isinstance(self.resource, PropertyGetter):
            return str(self.resource.properties().get(name, ''))
        raise PropertyError(f"{self.type} does not support custom properties")

    def properties(self) -> Dict[str, str]:
        if isinstance(self.resource, PropertyGetter):
            return self.resource.properties()
        return {}

    def log_extra(self) -> Dict[str, str]:
        return {
            'region': self.region.name,
            'resource_type': self.type,
            'resource_id': str(self.resource),
            'state': self.state.value,
        }

    def print_status(self) -> None:
        props = ', '.join(f'{k}: "{v}"' for k, v in sorted(self.properties().items()))
        status = _STATUS[self.state]
        if self.state in (ItemState.FAILED, ItemState.FILTERED) and self.reason:
            status = f"{status}: {self.reason}"
        print(f"{self.region.name} - {self.type} - {self.resource} - [{props}] - {status}")
        logging.debug(f"{self.type} {self.resource} is {self.state.value}", extra=self.log_extra())


class Queue(list):
    """Items in discovery order."""

    def count_states(self, *states: ItemState) -> int:
        return sum(1 for item in self if item.state in states)

    def count_total(self) -> int:
        return len(self)

    def in_state(self, *states: ItemState) -> List[Item]:
        return [item for item in self if item.state in states]
