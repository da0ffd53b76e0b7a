import pytest
from unittest.mock import MagicMock
from botocore.exceptions import ClientError
from awspurge.core.config import FeatureFlags
from awspurge.resources.ec2 import EC2Instance, list_instances


@pytest.fixture
def mock_session():
    return MagicMock()


@pytest.fixture
def ec2_client(mock_session):
    client = MagicMock()
    mock_session.client.return_value = client
    client.get_paginator.return_value.paginate.return_value = [{
        'Reservations': [{
            'Instances': [
                {'InstanceId': 'i-12345', 'State': {'Name': 'running'}, 'InstanceType': 't3.micro',
                 'Tags': [{'Key': 'Name', 'Value': 'web'}]},
                {'InstanceId': 'i-67890', 'State': {'Name': 'terminated'}},
            ]
        }]
    }]
    return client


def _protected():
    return ClientError({'Error': {'Code': 'OperationNotPermitted', 'Message': 'protected'}}, 'TerminateInstances')


def test_list_instances(mock_session, ec2_client):
    instances = list_instances(mock_session)

    mock_session.client.assert_called_with('ec2')
    assert [str(i) for i in instances] == ['i-12345', 'i-67890']
    assert instances[0].properties()['tag:Name'] == 'web'
    assert instances[0].properties()['InstanceType'] == 't3.micro'


def test_terminated_instances_are_filtered(mock_session, ec2_client):
    running, terminated = list_instances(mock_session)

    running.filter()
    with pytest.raises(ValueError):
        terminated.filter()


def test_remove_terminates(ec2_client):
    EC2Instance(ec2_client, {'InstanceId': 'i-12345'}).remove()
    ec2_client.terminate_instances.assert_called_once_with(InstanceIds=['i-12345'])
    ec2_client.modify_instance_attribute.assert_not_called()


def test_remove_protected_without_flag_raises(ec2_client):
    ec2_client.terminate_instances.side_effect = _protected()

    with pytest.raises(ClientError):
        EC2Instance(ec2_client, {'InstanceId': 'i-12345'}).remove()

    ec2_client.modify_instance_attribute.assert_not_called()


def test_remove_protected_with_flag_disables_protection(ec2_client):
    ec2_client.terminate_instances.side_effect = [_protected(), {}]
    instance = EC2Instance(ec2_client, {'InstanceId': 'i-12345'})
    instance.feature_flags(FeatureFlags(disable_deletion_protection={'EC2Instance': True}))

    instance.remove()

    ec2_client.modify_instance_attribute.assert_called_once_with(
        InstanceId='i-12345',
        DisableApiTermination={'Value': False}
    )
    assert ec2_client.terminate_instances.call_count == 2
