from typing import Any, Dict, Optional, Tuple, Type

from flask import request, jsonify
from marshmallow import Schema, ValidationError


def ok(payload: Any, status: int = 200):
    return jsonify(payload), status


def error(code: str, message: str, status: int = 400, **extra):
    body: Dict[str, Any] = {"error": {"code": code, "message": message}}
    if extra:
        body["error"].update(extra)
    return jsonify(body), status


def json_body() -> Dict[str, Any]:
    # Try parsing as JSON first (force=True allows missing Content-Type header)
    data = request.get_json(force=True, silent=True)
    if data is not None:
        return data
    # Fallback to form data (converted to dict) if JSON parsing fails
    return request.form.to_dict() if request.form else {}


def validate_schema(schema_cls: Type[Schema], data: Any) -> Tuple[Optional[Dict[str, Any]], Optional[Dict[str, Any]]]:
    """Load ``data`` with a marshmallow schema, returning ``(result, errors)``."""
    if not isinstance(data, dict):
        return None, {"_schema": ["Request body must be a JSON object"]}
    try:
        return schema_cls().load(data), None
    except ValidationError as err:
        return None, err.messages


def query_args() -> Dict[str, str]:
    """Query string as a dict, without empty values."""
    return {key: value for key, value in request.args.items() if value.strip() != ""}
