from collections import Counter
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from awspurge.core.config import AccountConfig, Config, PurgeParameters
from awspurge.resources import catalog


class FakeResource:
    def __init__(self, cloud, region, rtype, name, props):
        self.cloud = cloud
        self.region = region
        self.rtype = rtype
        self.name = name
        self.props = props

    def __str__(self):
        return self.name

    def properties(self):
        return dict(self.props)

    def remove(self):
        self.cloud.remove_calls.append(self.name)
        if self.name in self.cloud.remove_errors:
            raise RuntimeError(self.cloud.remove_errors[self.name])
        if self.name not in self.cloud.sticky:
            self.cloud.resources[(self.region, self.rtype)].pop(self.name, None)


class FilterableFakeResource(FakeResource):
    def filter(self):
        if self.name in self.cloud.filter_errors:
            raise ValueError(self.cloud.filter_errors[self.name])


class FakeCloud:
    """In-memory stand-in for AWS: resources per (region, type)."""

    def __init__(self):
        self.resources = {}
        self.remove_errors = {}
        self.filter_errors = {}
        self.list_errors = {}
        self.sticky = set()
        self.filterable_types = set()
        self.remove_calls = []
        self.list_calls = Counter()

    def add(self, region, rtype, name, **props):
        self.resources.setdefault((region, rtype), {})[name] = props

    def lister(self, rtype):
        def list_fake(session):
            region = session.region_name
            self.list_calls[(region, rtype)] += 1
            if (region, rtype) in self.list_errors:
                raise self.list_errors[(region, rtype)]
            cls = FilterableFakeResource if rtype in self.filterable_types else FakeResource
            return [cls(self, region, rtype, name, props)
                    for name, props in self.resources.get((region, rtype), {}).items()]
        return list_fake

    def new_session(self, region_name):
        session = MagicMock()
        session.region_name = region_name
        session.get_available_regions.return_value = [region_name]
        return session

    def region(self, name):
        from awspurge.region import Region
        return Region(name, lambda rtype: 'fake', self.new_session)


@pytest.fixture
def cloud(monkeypatch):
    """A FakeCloud whose types are registered as the only known listers."""
    fake = FakeCloud()
    listers = {}
    monkeypatch.setattr(catalog, 'LISTERS', listers)
    monkeypatch.setattr(catalog, 'CLOUD_CONTROL_MAPPING', {})

    def register(*rtypes):
        for rtype in rtypes:
            listers[rtype] = ('fake', fake.lister(rtype))
    fake.register = register
    return fake


@pytest.fixture
def account(cloud):
    return SimpleNamespace(
        id='222222222222',
        aliases=['sandbox-dev'],
        alias='sandbox-dev',
        resource_type_to_service=lambda rtype: 'fake',
        new_session=cloud.new_session,
    )


@pytest.fixture
def config():
    return Config(
        regions=['eu-west-1'],
        account_blocklist=['111111111111'],
        accounts={'222222222222': AccountConfig()},
    )


@pytest.fixture
def params():
    return PurgeParameters(no_dry_run=True, force=True, force_sleep=3)


@pytest.fixture
def no_sleep(monkeypatch):
    sleeps = []
    monkeypatch.setattr('awspurge.purger.time.sleep', sleeps.append)
    return sleeps
