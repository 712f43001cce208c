"""
Posts API Toolkit
=================
Developer helpers for the posts Lambda handlers:
  1. Invoke a single handler with an API Gateway event from a YAML/JSON file
  2. A local HTTP gateway that routes requests onto the handlers

Dependencies (pip install -e ".[toolkit]"):
  boto3>=1.28.0
  flask>=3.0.0
  pyyaml>=6.0.0

Example usage:
  export DYNAMODB_TABLE_NAME=posts
  export DYNAMODB_ENDPOINT_URL=http://localhost:8000   # DynamoDB Local

  # Invoke a handler directly
  python posts_toolkit.py invoke create event.yaml

  # Run the gateway on localhost:8080
  python posts_toolkit.py serve --host 0.0.0.0 --port 8080

  # In another terminal
  curl -X POST -H "Content-Type: application/json" \
       --data '{"postId": "1", "title": "Hello"}' http://localhost:8080/posts
"""
from __future__ import annotations

import argparse
import base64
import json
from typing import Any, Dict, Optional

import yaml

from posts_api import handler

OPERATIONS = {
    "get": handler.get_post,
    "create": handler.create_post,
    "update": handler.update_post,
    "delete": handler.delete_post,
    "list": handler.get_all_posts,
}


# ---------------------------
# Event Helpers
# ---------------------------

def load_event(path: str) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        if path.endswith((".yaml", ".yml")):
            event = yaml.safe_load(f)
        else:
            event = json.load(f)
    if not isinstance(event, dict):
        raise ValueError(f"Event file {path} must contain a mapping")
    return event


def invoke(operation: str, event: Dict[str, Any]) -> Dict[str, Any]:
    try:
        func = OPERATIONS[operation]
    except KeyError:
        raise ValueError(f"Unknown operation: {operation}")
    return func(event, None)


def build_event(method: str, path: str, path_parameters: Optional[Dict[str, str]],
                headers: Dict[str, str], data: bytes) -> Dict[str, Any]:
    """Shape a plain HTTP request like an API Gateway proxy event."""
    body: Optional[str] = None
    encoded = False
    if data:
        try:
            body = data.decode("utf-8")
        except UnicodeDecodeError:
            body = base64.b64encode(data).decode()
            encoded = True
    return {
        "httpMethod": method,
        "path": path,
        "pathParameters": path_parameters,
        "headers": headers,
        "body": body,
        "isBase64Encoded": encoded,
    }


# ---------------------------
# Local Gateway
# ---------------------------

def create_app():
    from flask import Flask, Response, request

    app = Flask(__name__)

    def dispatch(operation: str, path_parameters: Optional[Dict[str, str]] = None):
        event = build_event(
            request.method,
            request.path,
            path_parameters,
            dict(request.headers),
            request.get_data(),
        )
        result = invoke(operation, event)
        return Response(
            result["body"],
            status=result["statusCode"],
            headers=result.get("headers", {}),
        )

    @app.route("/posts", methods=["GET"])
    def list_posts():
        return dispatch("list")

    @app.route("/posts", methods=["POST"])
    def create_post():
        return dispatch("create")

    @app.route("/posts/<post_id>", methods=["GET"])
    def get_post(post_id):
        return dispatch("get", {"postId": post_id})

    @app.route("/posts/<post_id>", methods=["PUT"])
    def update_post(post_id):
        return dispatch("update", {"postId": post_id})

    @app.route("/posts/<post_id>", methods=["DELETE"])
    def delete_post(post_id):
        return dispatch("delete", {"postId": post_id})

    return app


def run_gateway(host: str, port: int):
    app = create_app()
    print(f"[*] Posts API gateway listening on http://{host}:{port}")
    app.run(host=host, port=port, threaded=True)


# ---------------------------
# CLI Interface
# ---------------------------

def cli(argv=None):
    parser = argparse.ArgumentParser(description="Posts API Toolkit CLI")
    sub = parser.add_subparsers(dest="command", required=True)

    # invoke
    i = sub.add_parser("invoke", help="Invoke a handler with an event (YAML/JSON)")
    i.add_argument("operation", choices=sorted(OPERATIONS), help="Handler to invoke")
    i.add_argument("event", nargs="?", help="Path to event YAML/JSON file (default: empty event)")

    # serve
    s = sub.add_parser("serve", help="Run the local API gateway")
    s.add_argument("--host", default="127.0.0.1", help="Bind address (default 127.0.0.1)")
    s.add_argument("--port", default=8080, type=int, help="Port (default 8080)")

    args = parser.parse_args(argv)

    if args.command == "invoke":
        event = load_event(args.event) if args.event else {}
        result = invoke(args.operation, event)
        printable = dict(result, body=json.loads(result["body"]))
        print(json.dumps(printable, indent=2))
        return 0 if result["statusCode"] == 200 else 1

    elif args.command == "serve":
        run_gateway(args.host, args.port)
    return 0


if __name__ == "__main__":
    raise SystemExit(cli())
