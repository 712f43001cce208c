# app/lambdas/posts_api/db.py
import os
import logging
from decimal import Context, Decimal, DecimalException
from typing import Any, Dict, List, Optional

import boto3
from boto3.dynamodb.types import TypeDeserializer, TypeSerializer
from botocore.exceptions import BotoCoreError, ClientError

from .errors import ConfigurationError, ParseError, StorageError
from .expressions import UpdateExpression

logger = logging.getLogger()

TABLE_NAME_VAR = "DYNAMODB_TABLE_NAME"
KEY_FIELD = "postId"

_serializer = TypeSerializer()
_deserializer = TypeDeserializer()

# DynamoDB numbers keep at most 38 significant digits.
_NUMBER_CONTEXT = Context(prec=38)


def create_client():
    """DynamoDB client shared by every invocation in this container."""
    endpoint_url = os.environ.get("DYNAMODB_ENDPOINT_URL") or None
    return boto3.client(
        "dynamodb",
        region_name=os.environ.get("AWS_REGION", "us-east-1"),
        endpoint_url=endpoint_url,
    )


def table_name() -> str:
    name = os.environ.get(TABLE_NAME_VAR)
    if not name:
        raise ConfigurationError(f"{TABLE_NAME_VAR} environment variable is not set")
    return name


def parse_number(text: str) -> Decimal:
    """Parse a JSON number, rounded to what DynamoDB can store."""
    return _NUMBER_CONTEXT.create_decimal(text)


def marshall(data: Dict[str, Any]) -> Dict[str, Dict[str, Any]]:
    item = {}
    for key, value in data.items():
        try:
            item[key] = _serializer.serialize(value)
        except DecimalException as e:
            raise ParseError(f"Number in field {key!r} is outside the range DynamoDB can store") from e
    return item


def unmarshall(item: Dict[str, Dict[str, Any]]) -> Dict[str, Any]:
    return {key: _deserializer.deserialize(value) for key, value in item.items()}


class PostStore:
    """One table of posts, keyed by ``postId``.

    Every method issues exactly one DynamoDB call and returns the raw
    response shape. botocore failures surface as StorageError.
    """

    def __init__(self, client, table: str):
        self.client = client
        self.table = table

    def _key(self, post_id: Optional[str]) -> Dict[str, Dict[str, Any]]:
        return marshall({KEY_FIELD: post_id})

    def _call(self, operation: str, **params) -> Dict[str, Any]:
        logger.debug("DynamoDB %s on %s", operation, self.table)
        try:
            return getattr(self.client, operation)(TableName=self.table, **params)
        except (ClientError, BotoCoreError) as e:
            raise StorageError(str(e)) from e

    def get(self, post_id: Optional[str]) -> Optional[Dict[str, Any]]:
        return self._call("get_item", Key=self._key(post_id)).get("Item")

    def put(self, post: Dict[str, Any]) -> Dict[str, Any]:
        return self._call("put_item", Item=marshall(post))

    def update(self, post_id: Optional[str], update: UpdateExpression) -> Dict[str, Any]:
        return self._call(
            "update_item",
            Key=self._key(post_id),
            UpdateExpression=update.expression,
            ExpressionAttributeNames=update.names,
            ExpressionAttributeValues=marshall(update.values),
        )

    def delete(self, post_id: Optional[str]) -> Dict[str, Any]:
        return self._call("delete_item", Key=self._key(post_id))

    def scan(self) -> List[Dict[str, Any]]:
        # Single page only; LastEvaluatedKey is ignored.
        return self._call("scan").get("Items", [])
