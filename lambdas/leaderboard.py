import os
import json
import math
import uuid
import base64
from datetime import datetime, timezone
from decimal import Decimal, DecimalException

import boto3
from boto3.dynamodb.types import DYNAMODB_CONTEXT
from botocore.exceptions import BotoCoreError, ClientError

DIFFICULTIES = ("easy", "medium", "hard")
DEFAULT_LIMIT = 10
DEFAULT_LANGUAGE = "fr"
LEADERBOARD_KEY = "LEADERBOARD"

HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Content-Type": "application/json",
}

STORE_ERRORS = (ClientError, BotoCoreError)


def _table():
    d = boto3.resource(
        "dynamodb",
        region_name=os.environ["AWS_REGION"],
        endpoint_url=os.environ.get("DYNAMODB_ENDPOINT_URL") or None,
    )
    return d.Table(os.environ["LEADERBOARD_TABLE"])


# built once per container; a missing setting fails the cold start
entries = _table()


def _resp(body, code=200):
    return {"statusCode": code, "headers": dict(HEADERS), "body": json.dumps(body)}


def _error(message, code, details=None):
    body = {"error": message}
    if details is not None:
        body["details"] = details
    return _resp(body, code)


def _coerce(v):
    if isinstance(v, Decimal):
        return int(v) if v == v.to_integral_value() else float(v)
    if isinstance(v, list):
        return [_coerce(x) for x in v]
    return v


def _public(item):
    """Strip the GSI bookkeeping attribute and turn Decimals back into numbers."""
    return {k: _coerce(v) for k, v in item.items() if k != "leaderboard"}


def _method(event):
    http = (event.get("requestContext") or {}).get("http") or {}
    m = event.get("httpMethod") or http.get("method") or ""
    return m.upper()


def _limit(raw):
    try:
        n = int(str(raw).strip())
    except (TypeError, ValueError):
        return DEFAULT_LIMIT
    return n if n >= 1 else DEFAULT_LIMIT


def _now_iso():
    # same shape as JS toISOString: millisecond precision, Z suffix
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _body(event):
    raw = event.get("body")
    if raw and event.get("isBase64Encoded"):
        raw = base64.b64decode(raw).decode("utf-8")
    return raw


def validate(entry):
    """Return the message of the first rule the entry breaks, or None."""
    if not isinstance(entry, dict):
        return "Player name is required"
    name = entry.get("playerName")
    if not isinstance(name, str) or not name.strip():
        return "Player name is required"
    score = entry.get("score")
    if isinstance(score, bool) or not isinstance(score, (int, float)):
        return "Valid score is required"
    if isinstance(score, float) and not math.isfinite(score):
        return "Valid score is required"
    if score < 0:
        return "Valid score is required"
    try:
        # DynamoDB numbers: 38 significant digits, bounded exponent
        DYNAMODB_CONTEXT.create_decimal(str(score))
    except DecimalException:
        return "Valid score is required"
    if entry.get("difficulty") not in DIFFICULTIES:
        return "Valid difficulty is required"
    words = entry.get("words")
    if words is not None and (
        not isinstance(words, list) or not all(isinstance(w, str) for w in words)
    ):
        return "Words must be a list of text"
    language = entry.get("language")
    if language is not None and not isinstance(language, str):
        return "Valid language is required"
    return None


def query_leaderboard(table, difficulty=None, limit=DEFAULT_LIMIT):
    if difficulty and difficulty != "all":
        resp = table.query(
            IndexName="GSI_difficulty",
            KeyConditionExpression="difficulty = :d",
            ExpressionAttributeValues={":d": difficulty},
            ScanIndexForward=False,
            Limit=limit,
        )
    else:
        # every item shares the "LEADERBOARD" partition on GSI_score
        resp = table.query(
            IndexName="GSI_score",
            KeyConditionExpression="leaderboard = :lb",
            ExpressionAttributeValues={":lb": LEADERBOARD_KEY},
            ScanIndexForward=False,
            Limit=limit,
        )
    return [_public(it) for it in resp.get("Items", [])]


def insert_entry(table, entry):
    item = {
        "id": str(uuid.uuid4()),
        "playerName": entry["playerName"],
        "score": Decimal(str(entry["score"])),
        "difficulty": entry["difficulty"],
        "words": entry.get("words") or [],
        "language": entry.get("language") or DEFAULT_LANGUAGE,
        "date": _now_iso(),
        "leaderboard": LEADERBOARD_KEY,
    }
    table.put_item(Item=item, ConditionExpression="attribute_not_exists(id)")
    print(f"[INFO] Saved score {entry['score']} for {entry['playerName']!r} ({entry['difficulty']}) as {item['id']}")
    return _public(item)


def route(event, table):
    try:
        method = _method(event)

        if method == "OPTIONS":
            return {"statusCode": 204, "headers": dict(HEADERS), "body": ""}

        if method == "GET":
            qs = event.get("queryStringParameters") or {}
            try:
                items = query_leaderboard(table, qs.get("difficulty"), _limit(qs.get("limit")))
            except STORE_ERRORS as e:
                print(f"[ERROR] DynamoDB GET error: {e}")
                return _error("Database query failed", 500)
            return _resp(items)

        if method == "POST":
            raw = _body(event)
            if not raw:
                return _error("Missing request body", 400)

            entry = json.loads(raw)
            problem = validate(entry)
            if problem:
                return _error(problem, 400)

            try:
                saved = insert_entry(table, entry)
            except STORE_ERRORS as e:
                print(f"[ERROR] DynamoDB POST error: {e}")
                return _error("Failed to save score", 500)
            return _resp(saved)

        return _error("Method not allowed", 405)
    except Exception as e:
        print(f"[ERROR] Function error: {e!r}")
        return _error("Internal server error", 500, details=str(e))


def handler(event, ctx):
    return route(event, entries)
