"""Region-scoped session acquisition."""
import logging
from typing import Callable, Optional

import boto3

from awspurge.core.errors import SkipRequest, UnknownEndpoint

GLOBAL_REGION = 'global'
GLOBAL_SESSION_REGION = 'us-east-1'
GLOBAL_SERVICES = {'iam', 'cloudfront', 'route53'}


class Region:
    """A configured region name plus the way to get sessions for it.

    Shared read-only by every scan worker of the region. A fresh boto3
    session is handed out per call because sessions are not thread safe.
    """

    def __init__(self, name: str,
                 resource_type_to_service: Callable[[str], Optional[str]],
                 new_session: Callable[[str], boto3.session.Session]):
        self.name = name
        self.resource_type_to_service = resource_type_to_service
        self.new_session = new_session

    def __repr__(self):
        return f"Region({self.name})"

    def session(self, resource_type: str) -> boto3.session.Session:
        service = self.resource_type_to_service(resource_type)
        if service is None:
            raise UnknownEndpoint(f"no service known for resource type {resource_type}")

        if service in GLOBAL_SERVICES:
            if self.name != GLOBAL_REGION:
                raise SkipRequest(f"{resource_type} is global, skipping region {self.name}")
            return self.new_session(GLOBAL_SESSION_REGION)

        if self.name == GLOBAL_REGION:
            raise SkipRequest(f"{resource_type} is regional, skipping global region")

        session = self.new_session(self.name)
        if self.name not in session.get_available_regions(service):
            raise UnknownEndpoint(f"{service} has no endpoint in {self.name}")
        logging.debug(f"[{self.name}] session for {resource_type} ({service})")
        return session
