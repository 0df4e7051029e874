import time

import boto3
from botocore.exceptions import ClientError


class DuplicateGuard:
    """Claims mail Message-IDs in a DynamoDB table so a resent mail is not texted twice."""

    def __init__(self, table: str, region_name: str = "us-east-1", ttl_secs: int = 86400, client=None):
        self.table = table
        self.ttl_secs = ttl_secs
        self._ddb = client or boto3.client("dynamodb", region_name=region_name)

    def was_processed(self, event_id: str) -> bool:
        try:
            self._ddb.put_item(
                TableName=self.table,
                Item={"pk": {"S": event_id}, "exp": {"N": str(int(time.time()) + self.ttl_secs)}},
                ConditionExpression="attribute_not_exists(pk)",
            )
            return False
        except ClientError as e:
            if e.response["Error"]["Code"] == "ConditionalCheckFailedException":
                return True
            raise

    def release(self, event_id: str) -> None:
        self._ddb.delete_item(TableName=self.table, Key={"pk": {"S": event_id}})
