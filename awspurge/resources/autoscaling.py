from awspurge.core.retry import retry_delete
from awspurge.resources.base import tags_to_properties, isoformat


class AutoScalingGroup:
    def __init__(self, client, group):
        self.client = client
        self.name = group['AutoScalingGroupName']
        self.created_time = group.get('CreatedTime')
        self.tags = group.get('Tags', [])
        self.status = group.get('Status', '')

    def __str__(self):
        return self.name

    def filter(self):
        if self.status == 'Delete in progress':
            raise ValueError('already being deleted')

    def properties(self):
        props = {
            'Name': self.name,
            'CreatedTime': isoformat(self.created_time),
        }
        props.update(tags_to_properties(self.tags))
        return props

    def remove(self):
        retry_delete(
            lambda: self.client.delete_auto_scaling_group(AutoScalingGroupName=self.name, ForceDelete=True),
            f"Delete ASG {self.name}"
        )


def list_groups(session):
    client = session.client('autoscaling')
    groups = []
    for page in client.get_paginator('describe_auto_scaling_groups').paginate():
        groups.extend(AutoScalingGroup(client, g) for g in page['AutoScalingGroups'])
    return groups
