"""Decides which discovered items are eligible for deletion."""
import logging
from typing import Dict, List

from awspurge.core.config import Filter
from awspurge.core.errors import PropertyError
from awspurge.item import Item, ItemState
from awspurge.resources.base import Filterable

FILTERED_BY_CONFIG = "filtered by config"


class FilterEngine:
    def __init__(self, filters: Dict[str, List[Filter]]):
        self.filters = filters

    def apply(self, item: Item) -> None:
        """Mark `item` FILTERED if its own check or a configured filter says so.

        Errors from the resource's own filter() only mark the item; they may
        come from a failed API call. A FilterEvaluationError from a configured
        filter propagates and aborts the scan.
        """
        if isinstance(item.resource, Filterable):
            try:
                item.resource.filter()
            except Exception as e:
                item.state = ItemState.FILTERED
                item.reason = str(e)
                return

        for flt in self.filters.get(item.type, []):
            try:
                prop = item.get_property(flt.property)
            except PropertyError as e:
                logging.warning(str(e), extra=item.log_extra())
                continue

            match = flt.match(prop)
            if flt.is_inverted():
                match = not match

            if match:
                item.state = ItemState.FILTERED
                item.reason = FILTERED_BY_CONFIG
                return
