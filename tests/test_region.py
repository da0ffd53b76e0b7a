from unittest.mock import MagicMock

import pytest

from awspurge.core.errors import SkipRequest, UnknownEndpoint
from awspurge.region import GLOBAL_SESSION_REGION, Region

SERVICES = {'EC2Instance': 'ec2', 'IAMRole': 'iam'}


@pytest.fixture
def new_session():
    def make(region_name):
        session = MagicMock()
        session.region_name = region_name
        session.get_available_regions.return_value = ['eu-west-1', 'us-east-1']
        return session
    return MagicMock(side_effect=make)


def test_regional_type_in_regional_region(new_session):
    region = Region('eu-west-1', SERVICES.get, new_session)

    session = region.session('EC2Instance')

    assert session.region_name == 'eu-west-1'
    session.get_available_regions.assert_called_with('ec2')


def test_regional_type_without_endpoint(new_session):
    region = Region('ap-east-2', SERVICES.get, new_session)
    with pytest.raises(UnknownEndpoint):
        region.session('EC2Instance')


def test_unknown_type(new_session):
    region = Region('eu-west-1', SERVICES.get, new_session)
    with pytest.raises(UnknownEndpoint):
        region.session('Mystery')


def test_global_type_only_in_global_region(new_session):
    with pytest.raises(SkipRequest):
        Region('eu-west-1', SERVICES.get, new_session).session('IAMRole')

    session = Region('global', SERVICES.get, new_session).session('IAMRole')
    assert session.region_name == GLOBAL_SESSION_REGION


def test_regional_type_skipped_in_global_region(new_session):
    with pytest.raises(SkipRequest):
        Region('global', SERVICES.get, new_session).session('EC2Instance')
    new_session.assert_not_called()


def test_s3_buckets_are_listed_per_region(new_session):
    services = dict(SERVICES, S3Bucket='s3')

    session = Region('eu-west-1', services.get, new_session).session('S3Bucket')

    assert session.region_name == 'eu-west-1'
    with pytest.raises(SkipRequest):
        Region('global', services.get, new_session).session('S3Bucket')
