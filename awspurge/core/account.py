"""Identity of the AWS account being purged."""
import logging
from typing import List, Optional

import boto3

from awspurge.resources.catalog import resource_type_to_service


class Account:
    def __init__(self, session: Optional[boto3.session.Session] = None, profile: Optional[str] = None):
        self.profile = profile
        self.session = session or boto3.session.Session(profile_name=profile)
        self.id = self.session.client('sts').get_caller_identity()['Account']
        self.aliases = self._load_aliases()
        logging.info(f"Account {self.id} aliases={self.aliases}")

    def _load_aliases(self) -> List[str]:
        iam = self.session.client('iam')
        aliases = []
        for page in iam.get_paginator('list_account_aliases').paginate():
            aliases.extend(page.get('AccountAliases', []))
        return aliases

    @property
    def alias(self) -> str:
        if self.aliases:
            return self.aliases[0]
        return f"no-alias-{self.id}"

    def resource_type_to_service(self, resource_type: str) -> Optional[str]:
        return resource_type_to_service(resource_type)

    def new_session(self, region_name: str) -> boto3.session.Session:
        creds = self.session.get_credentials()
        if creds is None:
            return boto3.session.Session(profile_name=self.profile, region_name=region_name)
        frozen = creds.get_frozen_credentials()
        return boto3.session.Session(
            aws_access_key_id=frozen.access_key,
            aws_secret_access_key=frozen.secret_key,
            aws_session_token=frozen.token,
            region_name=region_name,
        )
