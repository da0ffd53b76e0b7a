import logging
from botocore.exceptions import ClientError
from awspurge.core.config import FeatureFlags
from awspurge.core.retry import retry_delete
from awspurge.resources.base import isoformat


class ELBv2LoadBalancer:
    def __init__(self, client, lb):
        self.client = client
        self.arn = lb['LoadBalancerArn']
        self.name = lb['LoadBalancerName']
        self.lb_type = lb.get('Type', '')
        self.created_time = lb.get('CreatedTime')
        self.disable_deletion_protection = False

    def __str__(self):
        return self.name

    def feature_flags(self, flags: FeatureFlags):
        self.disable_deletion_protection = flags.disable_deletion_protection.get('ELBv2', False)

    def properties(self):
        return {
            'Name': self.name,
            'ARN': self.arn,
            'Type': self.lb_type,
            'CreatedTime': isoformat(self.created_time),
        }

    def remove(self):
        try:
            retry_delete(
                lambda: self.client.delete_load_balancer(LoadBalancerArn=self.arn),
                f"Delete ELBv2 {self.name}"
            )
        except ClientError as e:
            if e.response['Error']['Code'] != 'OperationNotPermitted' or not self.disable_deletion_protection:
                raise
            logging.info(f"Disabling deletion protection for ELBv2 {self.name}")
            self.client.modify_load_balancer_attributes(
                LoadBalancerArn=self.arn,
                Attributes=[{'Key': 'deletion_protection.enabled', 'Value': 'false'}]
            )
            retry_delete(
                lambda: self.client.delete_load_balancer(LoadBalancerArn=self.arn),
                f"Delete ELBv2 {self.name}"
            )


def list_load_balancers(session):
    elbv2 = session.client('elbv2')
    lbs = []
    for page in elbv2.get_paginator('describe_load_balancers').paginate():
        lbs.extend(ELBv2LoadBalancer(elbv2, lb) for lb in page.get('LoadBalancers', []))
    return lbs
