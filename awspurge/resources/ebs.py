from awspurge.core.retry import retry_delete
from awspurge.resources.base import tags_to_properties, isoformat


class EBSVolume:
    def __init__(self, client, volume):
        self.client = client
        self.volume_id = volume['VolumeId']
        self.state = volume.get('State', '')
        self.create_time = volume.get('CreateTime')
        self.tags = volume.get('Tags', [])

    def __str__(self):
        return self.volume_id

    def properties(self):
        props = {
            'State': self.state,
            'CreateTime': isoformat(self.create_time),
        }
        props.update(tags_to_properties(self.tags))
        return props

    def remove(self):
        retry_delete(
            lambda: self.client.delete_volume(VolumeId=self.volume_id),
            f"Delete EBS volume {self.volume_id}"
        )


class EBSSnapshot:
    def __init__(self, client, snapshot):
        self.client = client
        self.snapshot_id = snapshot['SnapshotId']
        self.start_time = snapshot.get('StartTime')
        self.tags = snapshot.get('Tags', [])

    def __str__(self):
        return self.snapshot_id

    def properties(self):
        props = {'StartTime': isoformat(self.start_time)}
        props.update(tags_to_properties(self.tags))
        return props

    def remove(self):
        retry_delete(
            lambda: self.client.delete_snapshot(SnapshotId=self.snapshot_id),
            f"Delete EBS snapshot {self.snapshot_id}"
        )


def list_volumes(session):
    ec2 = session.client('ec2')
    volumes = []
    for page in ec2.get_paginator('describe_volumes').paginate():
        volumes.extend(EBSVolume(ec2, v) for v in page.get('Volumes', []))
    return volumes


def list_snapshots(session):
    # Only snapshots owned by this account
    ec2 = session.client('ec2')
    snapshots = []
    for page in ec2.get_paginator('describe_snapshots').paginate(OwnerIds=['self']):
        snapshots.extend(EBSSnapshot(ec2, s) for s in page.get('Snapshots', []))
    return snapshots
