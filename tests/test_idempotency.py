import pytest
from botocore.exceptions import ClientError

from smtp2sms.utils.idempotency import DuplicateGuard


class StubDynamoDB:
    def __init__(self, error_code=None):
        self.error_code = error_code
        self.puts = []
        self.deletes = []

    def put_item(self, TableName, Item, ConditionExpression):
        if self.error_code:
            raise ClientError({"Error": {"Code": self.error_code, "Message": "nope"}}, "PutItem")
        self.puts.append({"TableName": TableName, "Item": Item, "ConditionExpression": ConditionExpression})
        return {}

    def delete_item(self, TableName, Key):
        self.deletes.append({"TableName": TableName, "Key": Key})
        return {}


def test_first_claim_is_not_duplicate():
    ddb = StubDynamoDB()
    guard = DuplicateGuard("dedupe", ttl_secs=60, client=ddb)

    assert guard.was_processed("<a@example.com>") is False
    put = ddb.puts[0]
    assert put["TableName"] == "dedupe"
    assert put["Item"]["pk"] == {"S": "<a@example.com>"}
    assert put["ConditionExpression"] == "attribute_not_exists(pk)"


def test_conditional_failure_means_duplicate():
    guard = DuplicateGuard("dedupe", client=StubDynamoDB("ConditionalCheckFailedException"))
    assert guard.was_processed("<a@example.com>") is True


def test_other_errors_propagate():
    guard = DuplicateGuard("dedupe", client=StubDynamoDB("ProvisionedThroughputExceededException"))
    with pytest.raises(ClientError):
        guard.was_processed("<a@example.com>")


def test_release_deletes_claim():
    ddb = StubDynamoDB()
    guard = DuplicateGuard("dedupe", client=ddb)

    guard.release("<a@example.com>")

    assert ddb.deletes == [{"TableName": "dedupe", "Key": {"pk": {"S": "<a@example.com>"}}}]
