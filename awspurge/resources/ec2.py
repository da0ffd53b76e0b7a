import logging
from botocore.exceptions import ClientError
from awspurge.core.config import FeatureFlags
from awspurge.core.retry import retry_delete
from awspurge.resources.base import tags_to_properties, isoformat


class EC2Instance:
    def __init__(self, client, instance):
        self.client = client
        self.instance_id = instance['InstanceId']
        self.state = instance.get('State', {}).get('Name', '')
        self.instance_type = instance.get('InstanceType', '')
        self.launch_time = instance.get('LaunchTime')
        self.tags = instance.get('Tags', [])
        self.disable_termination_protection = False
        self.disable_stop_protection = False

    def __str__(self):
        return self.instance_id

    def feature_flags(self, flags: FeatureFlags):
        self.disable_termination_protection = flags.disable_deletion_protection.get('EC2Instance', False)
        self.disable_stop_protection = flags.disable_ec2_instance_stop_protection

    def filter(self):
        if self.state == 'terminated':
            raise ValueError('already terminated')

    def properties(self):
        props = {
            'Identifier': self.instance_id,
            'InstanceState': self.state,
            'InstanceType': self.instance_type,
            'LaunchTime': isoformat(self.launch_time),
        }
        props.update(tags_to_properties(self.tags))
        return props

    def remove(self):
        try:
            retry_delete(
                lambda: self.client.terminate_instances(InstanceIds=[self.instance_id]),
                f"Terminate EC2 instance {self.instance_id}"
            )
        except ClientError as e:
            if e.response['Error']['Code'] != 'OperationNotPermitted':
                raise
            if not (self.disable_termination_protection or self.disable_stop_protection):
                raise
            self._disable_protection()
            retry_delete(
                lambda: self.client.terminate_instances(InstanceIds=[self.instance_id]),
                f"Terminate EC2 instance {self.instance_id}"
            )

    def _disable_protection(self):
        if self.disable_termination_protection:
            logging.info(f"Disabling termination protection for {self.instance_id}")
            self.client.modify_instance_attribute(
                InstanceId=self.instance_id, DisableApiTermination={'Value': False})
        if self.disable_stop_protection:
            logging.info(f"Disabling stop protection for {self.instance_id}")
            self.client.modify_instance_attribute(
                InstanceId=self.instance_id, DisableApiStop={'Value': False})


def list_instances(session):
    ec2 = session.client('ec2')
    resources = []
    paginator = ec2.get_paginator('describe_instances')
    for page in paginator.paginate():
        for reservation in page.get('Reservations', []):
            for instance in reservation.get('Instances', []):
                resources.append(EC2Instance(ec2, instance))
    return resources
