"""Registry of the resource types awspurge knows how to list and remove."""
from typing import Dict, List, Optional

from awspurge.resources import autoscaling, ebs, ec2, elb, iam, lambda_, s3
from awspurge.resources.base import Lister
from awspurge.resources.cloudcontrol import cloud_control_lister, is_cloud_control_type

# resource type -> (service, lister)
LISTERS: Dict[str, tuple] = {
    'EC2Instance': ('ec2', ec2.list_instances),
    'EBSVolume': ('ec2', ebs.list_volumes),
    'EBSSnapshot': ('ec2', ebs.list_snapshots),
    'S3Bucket': ('s3', s3.list_buckets),
    'IAMRole': ('iam', iam.list_roles),
    'LambdaFunction': ('lambda', lambda_.list_functions),
    'AutoScalingGroup': ('autoscaling', autoscaling.list_groups),
    'ELBv2': ('elbv2', elb.list_load_balancers),
}

# Cloud Control type -> classic type it supersedes
CLOUD_CONTROL_MAPPING: Dict[str, str] = {
    'AWS::EC2::Instance': 'EC2Instance',
    'AWS::Lambda::Function': 'LambdaFunction',
    'AWS::AutoScaling::AutoScalingGroup': 'AutoScalingGroup',
}


def get_lister_names() -> List[str]:
    return list(LISTERS)


def get_cloud_control_mapping() -> Dict[str, str]:
    return dict(CLOUD_CONTROL_MAPPING)


def get_lister(resource_type: str) -> Lister:
    if resource_type in LISTERS:
        return LISTERS[resource_type][1]
    if is_cloud_control_type(resource_type):
        return cloud_control_lister(resource_type)
    raise KeyError(f"unknown resource type {resource_type}")


def resource_type_to_service(resource_type: str) -> Optional[str]:
    if resource_type in LISTERS:
        return LISTERS[resource_type][0]
    if is_cloud_control_type(resource_type):
        return 'cloudcontrol'
    return None
