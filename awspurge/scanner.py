"""Bounded-parallel discovery of the resources in one region.

Every resource type is listed by its own task on a thread pool of
SCANNER_PARALLEL_QUERIES workers. Tasks push Items onto one bounded queue
that the caller consumes as a stream; the stream is closed once every task
has completed.
"""
import logging
import queue
import textwrap
import threading
import traceback
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Iterator, Sequence

from botocore.exceptions import BotoCoreError, ClientError

from awspurge.core.errors import SkipRequest, UnknownEndpoint, classify_client_error
from awspurge.item import Item
from awspurge.resources import catalog

SCANNER_PARALLEL_QUERIES = 16
SCANNER_BUFFER_SIZE = 100
PUT_POLL_INTERVAL = 0.1

_CLOSED = object()


class Scanner:
    def __init__(self, region, resource_types: Sequence[str], get_lister=catalog.get_lister,
                 parallel: int = SCANNER_PARALLEL_QUERIES, buffer_size: int = SCANNER_BUFFER_SIZE):
        self.region = region
        self.resource_types = list(resource_types)
        self.get_lister = get_lister
        self.parallel = parallel
        self.items = queue.Queue(maxsize=buffer_size)
        self._abandoned = threading.Event()

    def __iter__(self) -> Iterator[Item]:
        producer = threading.Thread(target=self.run, name=f"scan-{self.region.name}", daemon=True)
        producer.start()
        try:
            while True:
                item = self.items.get()
                if item is _CLOSED:
                    return
                yield item
        finally:
            # Unblocks producers if the consumer stopped early
            self._abandoned.set()
            producer.join()

    def run(self):
        with ThreadPoolExecutor(max_workers=self.parallel,
                                thread_name_prefix=f"scan-{self.region.name}") as executor:
            futures = [executor.submit(self.list_resource_type, rtype) for rtype in self.resource_types]
            wait(futures)
        self._put(_CLOSED)

    def list_resource_type(self, resource_type: str):
        """Scan task for one resource type; never raises."""
        try:
            self._list(resource_type)
        except Exception as e:
            dump = textwrap.indent(f"{type(e).__name__}: {e}\n\n{traceback.format_exc()}", "    ")
            logging.error(f"Listing {resource_type} failed:\n{dump}",
                          extra={'region': self.region.name, 'resource_type': resource_type})

    def _list(self, resource_type: str):
        if self._abandoned.is_set():
            return

        lister = self.get_lister(resource_type)
        try:
            resources = lister(self.region.session(resource_type))
        except (ClientError, BotoCoreError, SkipRequest, UnknownEndpoint) as e:
            err = classify_client_error(e)
            if isinstance(err, SkipRequest):
                logging.debug(f"skipping request: {err}")
                return
            if isinstance(err, UnknownEndpoint):
                logging.warning(f"skipping request: {err}")
                return
            dump = textwrap.indent(str(err), "    ")
            logging.error(f"Listing {resource_type} failed:\n{dump}",
                          extra={'region': self.region.name, 'resource_type': resource_type})
            return

        logging.debug(f"[{self.region.name}] {resource_type}: {len(resources)} found")
        for resource in resources:
            if not self._put(Item(resource, self.region, resource_type, lister)):
                return

    def _put(self, item) -> bool:
        while not self._abandoned.is_set():
            try:
                self.items.put(item, timeout=PUT_POLL_INTERVAL)
                return True
            except queue.Full:
                continue
        return False


def scan(region, resource_types: Sequence[str], **kwargs) -> Iterator[Item]:
    """Stream the Items of every resource type found in `region`."""
    return iter(Scanner(region, resource_types, **kwargs))
