import logging
from botocore.exceptions import ClientError
from awspurge.core.retry import retry_delete
from awspurge.resources.base import isoformat

DELETE_BATCH_SIZE = 1000


def _bucket_region(location):
    # get_bucket_location returns None for us-east-1 and 'EU' for old eu-west-1 buckets
    if not location:
        return 'us-east-1'
    if location == 'EU':
        return 'eu-west-1'
    return location


class S3Bucket:
    def __init__(self, client, bucket):
        self.client = client
        self.name = bucket['Name']
        self.creation_date = bucket.get('CreationDate')

    def __str__(self):
        return f"s3://{self.name}"

    def properties(self):
        return {
            'Name': self.name,
            'CreationDate': isoformat(self.creation_date),
        }

    def remove(self):
        self._abort_multipart_uploads()
        self._delete_object_versions()
        retry_delete(lambda: self.client.delete_bucket(Bucket=self.name), f"Delete S3 bucket {self.name}")

    def _abort_multipart_uploads(self):
        paginator = self.client.get_paginator('list_multipart_uploads')
        for page in paginator.paginate(Bucket=self.name):
            for upload in page.get('Uploads', []):
                key, upload_id = upload['Key'], upload['UploadId']
                retry_delete(
                    lambda: self.client.abort_multipart_upload(Bucket=self.name, Key=key, UploadId=upload_id),
                    f"Abort MPU for {key}"
                )

    def _delete_object_versions(self):
        paginator = self.client.get_paginator('list_object_versions')
        for page in paginator.paginate(Bucket=self.name):
            objs = [{'Key': v['Key'], 'VersionId': v['VersionId']} for v in page.get('Versions', [])]
            objs += [{'Key': d['Key'], 'VersionId': d['VersionId']} for d in page.get('DeleteMarkers', [])]
            for start in range(0, len(objs), DELETE_BATCH_SIZE):
                batch = {'Objects': objs[start:start + DELETE_BATCH_SIZE], 'Quiet': True}
                retry_delete(
                    lambda: self.client.delete_objects(Bucket=self.name, Delete=batch),
                    f"Delete objects in {self.name}"
                )
            if objs:
                logging.debug(f"Deleted {len(objs)} object versions from {self.name}")


def list_buckets(session):
    """Buckets located in the session's region."""
    s3 = session.client('s3')
    region = s3.meta.region_name
    buckets = []
    for bucket in s3.list_buckets().get('Buckets', []):
        try:
            location = s3.get_bucket_location(Bucket=bucket['Name']).get('LocationConstraint')
        except ClientError as e:
            # bucket vanished between list and lookup
            if e.response['Error']['Code'] == 'NoSuchBucket':
                continue
            raise
        if _bucket_region(location) == region:
            buckets.append(S3Bucket(s3, bucket))
    return buckets
