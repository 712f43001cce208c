# app/lambdas/posts_api/handler.py
import base64
import binascii
import functools
import json
import logging
import os
import traceback
from decimal import Decimal, DecimalException

from boto3.dynamodb.types import Binary

from . import db
from .errors import InvalidInput, ParseError
from .expressions import build_set_expression

logger = logging.getLogger()


def _log_level(name):
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else logging.INFO


logger.setLevel(_log_level(os.environ.get("LOG_LEVEL", "INFO")))

client = db.create_client()


def _json_default(value):
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, Binary):
        value = value.value
    if isinstance(value, (bytes, bytearray)):
        return base64.b64encode(value).decode()
    if isinstance(value, (set, frozenset)):
        return sorted(value, key=str)
    if hasattr(value, "isoformat"):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _response(status_code, body):
    return {
        "statusCode": status_code,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps(body, default=_json_default),
    }


def _format_stack(exc):
    return "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))


def api_operation(success_message, failure_message):
    """
    Wrap a handler body so every invocation returns an envelope.
    The wrapped function returns the success payload; anything it raises
    becomes a 500 carrying the error message and traceback.
    """
    def decorator(func):
        @functools.wraps(func)
        def wrapper(event, context):
            logger.info("Received event: %s", json.dumps(event, default=str))
            try:
                payload = func(event or {}, context)
            except Exception as e:
                logger.exception(failure_message)
                return _response(500, {
                    "message": failure_message,
                    "errorMsg": str(e),
                    "errorStack": _format_stack(e),
                })
            return _response(200, {"message": success_message, **payload})
        return wrapper
    return decorator


def _store():
    return db.PostStore(client, db.table_name())


def _require_body(event):
    if event.get("body") is None:
        raise InvalidInput("Request body cannot be null")


def _require_path_parameters(event):
    if event.get("pathParameters") is None:
        raise InvalidInput("Path parameters cannot be null")


def _parse_body(event):
    raw = event["body"]
    try:
        if event.get("isBase64Encoded"):
            raw = base64.b64decode(raw, validate=True).decode("utf-8")
    except (ValueError, binascii.Error) as e:
        raise ParseError(f"Request body is not valid base64-encoded UTF-8: {e}") from e
    try:
        body = json.loads(raw, parse_float=db.parse_number, parse_int=db.parse_number)
    except (json.JSONDecodeError, DecimalException) as e:
        raise ParseError(f"Request body is not valid JSON: {e}") from e
    if not isinstance(body, dict):
        raise ParseError("Request body must be a JSON object")
    return body


def _post_id(event):
    return (event.get("pathParameters") or {}).get(db.KEY_FIELD)


@api_operation("Successfully retrieved post", "Failed to get post")
def get_post(event, context):
    item = _store().get(_post_id(event))
    logger.info("Item: %s", item)
    return {
        "data": db.unmarshall(item) if item else {},
        "rawData": item,
    }


@api_operation("Successfully created post", "Failed to create post")
def create_post(event, context):
    _require_body(event)
    body = _parse_body(event)
    return {"createResult": _store().put(body)}


@api_operation("Successfully updated post", "Failed to update post")
def update_post(event, context):
    _require_body(event)
    _require_path_parameters(event)
    body = _parse_body(event)
    if not body:
        raise InvalidInput("Request body must contain at least one field")

    update = build_set_expression(list(body.items()))
    return {"updateResult": _store().update(_post_id(event), update)}


@api_operation("Successfully deleted post", "Failed to delete post")
def delete_post(event, context):
    _require_path_parameters(event)
    return {"deleteResult": _store().delete(_post_id(event))}


@api_operation("Successfully retrieved posts", "Failed to retrieve posts")
def get_all_posts(event, context):
    items = _store().scan()
    return {
        "data": [db.unmarshall(item) for item in items],
        "Items": items,
    }
