"""Generic resources backed by the AWS Cloud Control API.

Any `AWS::<Service>::<Type>` name can be scanned this way, which covers
types that have no dedicated lister.
"""
import json
import logging
from awspurge.core.retry import retry_delete
from awspurge.resources.base import tags_to_properties

CLOUD_CONTROL_PREFIX = 'AWS::'


class CloudControlResource:
    def __init__(self, client, type_name, description):
        self.client = client
        self.type_name = type_name
        self.identifier = description['Identifier']
        self.raw_properties = _decode_properties(description.get('Properties'))

    def __str__(self):
        return self.identifier

    def properties(self):
        props = {'Identifier': self.identifier}
        for key, value in self.raw_properties.items():
            if key == 'Tags' and isinstance(value, list):
                props.update(tags_to_properties(value))
            elif isinstance(value, (str, int, float, bool)):
                props[key] = str(value)
        return props

    def remove(self):
        response = retry_delete(
            lambda: self.client.delete_resource(TypeName=self.type_name, Identifier=self.identifier),
            f"Delete {self.type_name} {self.identifier}"
        )
        event = (response or {}).get('ProgressEvent', {})
        if event.get('OperationStatus') == 'FAILED':
            raise RuntimeError(event.get('StatusMessage') or f"{event.get('ErrorCode')}")


def _decode_properties(raw):
    if not raw:
        return {}
    try:
        return json.loads(raw)
    except ValueError:
        logging.debug(f"Unparsable Cloud Control properties: {raw!r}")
        return {}


def is_cloud_control_type(resource_type: str) -> bool:
    return resource_type.startswith(CLOUD_CONTROL_PREFIX)


def cloud_control_lister(type_name: str):
    def lister(session):
        client = session.client('cloudcontrol')
        resources = []
        paginator = client.get_paginator('list_resources')
        for page in paginator.paginate(TypeName=type_name):
            resources.extend(
                CloudControlResource(client, type_name, d) for d in page.get('ResourceDescriptions', [])
            )
        return resources
    lister.__name__ = f"list_{type_name.replace('::', '_')}"
    return lister
