"""Scan, filter and drive every discovered resource to deletion."""
import logging
import time
from contextlib import closing
from typing import Dict, List, Tuple

from awspurge.core.config import Config, PurgeParameters
from awspurge.core.errors import MaxWaitRetriesExceeded, StuckFailuresError, UnsafeForceSleepError
from awspurge.core.logging import timed
from awspurge.core.resource_types import resolve_resource_types
from awspurge.filters import FilterEngine
from awspurge.item import Item, ItemState, Queue
from awspurge.prompt import prompt
from awspurge.region import Region
from awspurge.resources import catalog
from awspurge.resources.base import FeatureFlagGetter, Filterable, Resource
from awspurge.scanner import scan

MIN_FORCE_SLEEP = 3
WAIT_INTERVAL = 5
MAX_STUCK_FAILURE_ROUNDS = 2

ListCache = Dict[Tuple[str, str], List[Resource]]


class Purger:
    def __init__(self, params: PurgeParameters, account, config: Config):
        self.params = params
        self.account = account
        self.config = config
        self.items = Queue()

    def run(self):
        if self.params.no_dry_run and self.params.force_sleep < MIN_FORCE_SLEEP:
            raise UnsafeForceSleepError(
                f"value for --force-sleep cannot be less than {MIN_FORCE_SLEEP} seconds "
                "if --no-dry-run is set. This is for your own protection.")

        self.config.validate_account(self.account.id, self.account.aliases)

        print(f"Do you really want to purge the account with the ID {self.account.id} "
              f"and the alias '{self.account.alias}'?")
        self._confirm()

        self.scan()

        if self.items.count_states(ItemState.NEW) == 0:
            print("No resource to delete.")
            return

        if not self.params.no_dry_run:
            print("The above resources would be deleted with the supplied configuration. "
                  "Provide --no-dry-run to actually destroy resources.")
            return

        print(f"Do you really want to purge these resources on the account with the ID {self.account.id} "
              f"and the alias '{self.account.alias}'?")
        self._confirm()

        self.converge()

        print(f"Purge complete: {self.items.count_states(ItemState.FAILED)} failed, "
              f"{self.items.count_states(ItemState.FILTERED)} skipped, "
              f"{self.items.count_states(ItemState.FINISHED)} finished.\n")

    def _confirm(self):
        if self.params.force:
            print(f"Waiting {self.params.force_sleep}s before continuing.")
            time.sleep(self.params.force_sleep)
        else:
            prompt(self.account.alias)

    def resource_types(self) -> List[str]:
        account_config = self.config.account(self.account.id)
        return resolve_resource_types(
            catalog.get_lister_names(),
            catalog.get_cloud_control_mapping(),
            [self.params.targets, self.config.resource_types.targets, account_config.resource_types.targets],
            [self.params.excludes, self.config.resource_types.excludes, account_config.resource_types.excludes],
            [self.params.cloud_control, self.config.resource_types.cloud_control,
             account_config.resource_types.cloud_control],
        )

    @timed
    def scan(self):
        resource_types = self.resource_types()
        engine = FilterEngine(self.config.filters(self.account.id))
        queue = Queue()

        for region_name in self.config.regions:
            region = Region(region_name, self.account.resource_type_to_service, self.account.new_session)
            logging.info(f"[{region_name}] Scanning {len(resource_types)} resource types")

            with closing(scan(region, resource_types)) as items:
                for item in items:
                    if isinstance(item.resource, FeatureFlagGetter):
                        item.resource.feature_flags(self.config.feature_flags)

                    queue.append(item)
                    engine.apply(item)

                    if item.state != ItemState.FILTERED or not self.params.quiet:
                        item.print_status()

        print(f"Scan complete: {queue.count_total()} total, {queue.count_states(ItemState.NEW)} nukeable, "
              f"{queue.count_states(ItemState.FILTERED)} filtered.\n")

        self.items = queue

    def converge(self):
        """Run removal rounds until nothing is left or an escalation counter trips."""
        fail_count = 0
        waiting_count = 0
        max_wait_retries = self.params.max_wait_retries

        while True:
            self.handle_queue()

            if (self.items.count_states(ItemState.PENDING, ItemState.WAITING, ItemState.NEW) == 0
                    and self.items.count_states(ItemState.FAILED) > 0):
                if fail_count >= MAX_STUCK_FAILURE_ROUNDS:
                    logging.error("There are resources in failed state, but none are ready for deletion, anymore.")
                    print()
                    failed = self.items.in_state(ItemState.FAILED)
                    for item in failed:
                        item.print_status()
                        logging.error(item.reason, extra=item.log_extra())
                    raise StuckFailuresError(failed)
                fail_count += 1
            else:
                fail_count = 0

            if (max_wait_retries != 0
                    and self.items.count_states(ItemState.WAITING, ItemState.PENDING) > 0
                    and self.items.count_states(ItemState.NEW) == 0):
                if waiting_count >= max_wait_retries:
                    raise MaxWaitRetriesExceeded(max_wait_retries)
                waiting_count += 1
            else:
                waiting_count = 0

            if self.items.count_states(ItemState.NEW, ItemState.PENDING, ItemState.FAILED, ItemState.WAITING) == 0:
                return

            time.sleep(WAIT_INTERVAL)

    def handle_queue(self):
        """One round over every item. Listings are cached per region and type."""
        cache: ListCache = {}

        for item in self.items:
            if item.state == ItemState.NEW:
                self.handle_remove(item)
                item.print_status()
            elif item.state == ItemState.FAILED:
                self.handle_remove(item)
                self.handle_wait(item, cache)
                item.print_status()
            elif item.state == ItemState.PENDING:
                self.handle_wait(item, cache)
                # The verdict of this first check is discarded; it sticks from
                # the next round on.
                item.state = ItemState.WAITING
                item.print_status()
            elif item.state == ItemState.WAITING:
                self.handle_wait(item, cache)
                item.print_status()

        print()
        print(f"Removal requested: {self.items.count_states(ItemState.WAITING, ItemState.PENDING)} waiting, "
              f"{self.items.count_states(ItemState.FAILED)} failed, "
              f"{self.items.count_states(ItemState.FILTERED)} skipped, "
              f"{self.items.count_states(ItemState.FINISHED)} finished\n")

    def handle_remove(self, item: Item):
        try:
            item.resource.remove()
        except Exception as e:
            item.state = ItemState.FAILED
            item.reason = str(e)
            return

        item.state = ItemState.PENDING
        item.reason = ''

    def handle_wait(self, item: Item, cache: ListCache):
        key = (item.region.name, item.type)
        left = cache.get(key)
        if left is None:
            try:
                left = item.list()
            except Exception as e:
                item.state = ItemState.FAILED
                item.reason = str(e)
                return
            cache[key] = left

        for resource in left:
            if not item.equals(resource):
                continue
            if isinstance(resource, Filterable):
                try:
                    resource.filter()
                except Exception as e:
                    logging.debug(f"{item.type} {item.resource} still listed but filtered: {e}",
                                  extra=item.log_extra())
            return

        item.state = ItemState.FINISHED
        item.reason = ''
