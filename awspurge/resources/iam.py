import logging
from awspurge.core.retry import retry_delete
from awspurge.resources.base import tags_to_properties, isoformat


class IAMRole:
    def __init__(self, client, role):
        self.client = client
        self.name = role['RoleName']
        self.path = role.get('Path', '/')
        self.create_date = role.get('CreateDate')
        self.tags = role.get('Tags', [])

    def __str__(self):
        return self.name

    def filter(self):
        if self.path.startswith('/aws-service-role/'):
            raise ValueError('cannot delete service roles')
        if self.path.startswith('/aws-reserved/'):
            raise ValueError('cannot delete AWS reserved roles')

    def properties(self):
        props = {
            'Name': self.name,
            'Path': self.path,
            'CreateDate': isoformat(self.create_date),
        }
        props.update(tags_to_properties(self.tags))
        return props

    def remove(self):
        self._remove_policies()
        self._remove_from_instance_profiles()
        retry_delete(lambda: self.client.delete_role(RoleName=self.name), f"Delete IAM role {self.name}")

    def _remove_policies(self):
        paginator = self.client.get_paginator('list_attached_role_policies')
        for page in paginator.paginate(RoleName=self.name):
            for policy in page.get('AttachedPolicies', []):
                arn = policy['PolicyArn']
                retry_delete(lambda: self.client.detach_role_policy(RoleName=self.name, PolicyArn=arn),
                             f"Detach policy {arn} from {self.name}")

        paginator = self.client.get_paginator('list_role_policies')
        for page in paginator.paginate(RoleName=self.name):
            for policy_name in page.get('PolicyNames', []):
                retry_delete(lambda: self.client.delete_role_policy(RoleName=self.name, PolicyName=policy_name),
                             f"Delete inline policy {policy_name} from {self.name}")

    def _remove_from_instance_profiles(self):
        paginator = self.client.get_paginator('list_instance_profiles_for_role')
        for page in paginator.paginate(RoleName=self.name):
            for profile in page.get('InstanceProfiles', []):
                profile_name = profile['InstanceProfileName']
                logging.debug(f"Removing {self.name} from instance profile {profile_name}")
                retry_delete(
                    lambda: self.client.remove_role_from_instance_profile(
                        InstanceProfileName=profile_name, RoleName=self.name),
                    f"Remove {self.name} from {profile_name}"
                )


def list_roles(session):
    iam = session.client('iam')
    roles = []
    for page in iam.get_paginator('list_roles').paginate():
        roles.extend(IAMRole(iam, role) for role in page.get('Roles', []))
    return roles
