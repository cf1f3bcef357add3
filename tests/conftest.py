"""Shared fixtures. The environment is seeded before the handler module builds its table."""

import os

os.environ.setdefault("AWS_REGION", "us-east-1")
os.environ.setdefault("AWS_DEFAULT_REGION", "us-east-1")
os.environ.setdefault("LEADERBOARD_TABLE", "leaderboard-test")

import pytest
from botocore.exceptions import ClientError


class FakeTable:
    """In-memory stand-in for the boto3 Table surface the handler uses."""

    def __init__(self, items=None, fail=None):
        self.items = list(items or [])
        self.fail = fail  # operation name to raise ClientError from
        self.queries = []
        self.puts = []

    def _maybe_fail(self, op):
        if self.fail == op:
            raise ClientError(
                {"Error": {"Code": "ResourceNotFoundException", "Message": "table gone"}},
                op,
            )

    def query(self, **kwargs):
        self._maybe_fail("Query")
        self.queries.append(kwargs)
        attr = kwargs["KeyConditionExpression"].split(" = ")[0]
        (value,) = kwargs["ExpressionAttributeValues"].values()
        hits = [it for it in self.items if it.get(attr) == value]
        hits.sort(key=lambda it: it["score"], reverse=not kwargs.get("ScanIndexForward", True))
        return {"Items": hits[: kwargs["Limit"]]}

    def put_item(self, Item, **kwargs):
        self._maybe_fail("PutItem")
        self.puts.append(kwargs)
        self.items.append(dict(Item))
        return {}


@pytest.fixture
def table():
    return FakeTable()


@pytest.fixture
def make_table():
    return FakeTable
