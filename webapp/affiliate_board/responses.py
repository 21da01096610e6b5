"""
Response envelope and error mapping shared by every API view.

Every response body is ``{success, message, data, timestamp}``.
"""

import json
from functools import wraps
from typing import Any, Optional, Type, TypeVar

from django.core.exceptions import ObjectDoesNotExist
from django.core.serializers.json import DjangoJSONEncoder
from django.db import IntegrityError
from django.http import Http404, JsonResponse
from django.utils import timezone
from django.views.decorators.csrf import csrf_exempt
from pydantic import BaseModel
from pydantic import ValidationError as SchemaValidationError

from src.core.exceptions.base import ConfigurationError, ValidationError
from src.core.exceptions.delivery_errors import TemplateError, WhatsAppRequestError
from src.core.exceptions.robot_errors import InvalidStatusTransitionError, RobotAlreadyRunningError
from src.shared.logging.log_setup import get_logger

logger = get_logger(__name__)

SchemaT = TypeVar("SchemaT", bound=BaseModel)


def api_response(data: Any = None, message: str = "OK", status: int = 200) -> JsonResponse:
    return JsonResponse(
        {
            "success": 200 <= status < 400,
            "message": message,
            "data": data,
            "timestamp": timezone.now().isoformat(),
        },
        status=status,
        encoder=DjangoJSONEncoder,
    )


def error_response(message: str, status: int, errors: Optional[list] = None) -> JsonResponse:
    return api_response({"errors": errors} if errors else None, message=message, status=status)


def parse_body(request, schema: Type[SchemaT], base: Optional[dict] = None) -> SchemaT:
    """
    Validate the JSON request body against a schema.
    
    Args:
        request: Incoming request
        schema: Pydantic model to validate with
        base: Current values the body is merged over (partial updates)
        
    Raises:
        ValidationError: If the body is not a JSON object
        pydantic.ValidationError: If the merged payload fails the schema
    """
    try:
        payload = json.loads(request.body or b"{}")
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ValidationError("body", None, f"Invalid JSON: {e}")
    if not isinstance(payload, dict):
        raise ValidationError("body", type(payload).__name__, "Request body must be a JSON object")
    if base is not None:
        payload = {**base, **payload}
    return schema.model_validate(payload)


def _schema_errors(error: SchemaValidationError) -> list:
    return [
        {"field": ".".join(str(part) for part in err["loc"]) or "body", "message": err["msg"]}
        for err in error.errors()
    ]


def api_view(*methods: str):
    """
    Restrict a view to the given HTTP methods and map domain errors to statuses.
    
    Validation errors map to 400, missing rows to 404, natural-key conflicts
    and an already-running robot to 409, missing configuration to 503, gateway
    failures to 502 and anything else to 500.
    """
    def decorator(view):
        @csrf_exempt
        @wraps(view)
        def wrapper(request, *args, **kwargs):
            if request.method not in methods:
                return error_response(f"Method {request.method} not allowed", 405)
            try:
                return view(request, *args, **kwargs)
            except SchemaValidationError as e:
                return error_response("Validation failed", 400, _schema_errors(e))
            except (ValidationError, TemplateError, InvalidStatusTransitionError) as e:
                return error_response(str(e), 400)
            except (ObjectDoesNotExist, Http404):
                return error_response("Resource not found", 404)
            except IntegrityError as e:
                logger.warning("api_integrity_conflict", path=request.path, error=str(e))
                return error_response("Resource already exists", 409)
            except RobotAlreadyRunningError as e:
                return error_response(str(e), 409)
            except ConfigurationError as e:
                return error_response(str(e), 503)
            except WhatsAppRequestError as e:
                return error_response(str(e), 502)
            except Exception as e:
                logger.error("api_unexpected_error", path=request.path, method=request.method, error=str(e), exc_info=True)
                return error_response("Internal server error", 500)
        return wrapper
    return decorator
