from src.shared.logging.log_setup import get_logger

from .. import robot_runtime
from ..pagination import query_int
from ..responses import api_response, api_view, parse_body
from ..schemas import ProbeMessageRequest, RobotRunRequest

logger = get_logger(__name__)


@api_view("GET")
def robot_status(request):
    return api_response(robot_runtime.get_robot_state().snapshot(), "Robot status retrieved")


@api_view("POST")
def robot_run(request):
    payload = parse_body(request, RobotRunRequest)
    robot = robot_runtime.get_robot()
    result = robot.start_in_background(
        categories=[c.value for c in payload.categories] if payload.categories else None,
        platforms=[p.value for p in payload.platforms] if payload.platforms else None,
        limit=payload.limit,
    )
    logger.info("robot_run_started_via_api", execution_id=result.execution_id)
    return api_response(
        {"execution_id": result.execution_id, "options": result.options},
        "Robot run started",
        status=202,
    )


@api_view("POST")
def robot_stop(request):
    state = robot_runtime.get_robot_state()
    if not state.is_running:
        return api_response({"stopped": False}, "Robot is not running")
    stopped = robot_runtime.get_robot().stop()
    return api_response({"stopped": stopped}, "Stop requested")


@api_view("GET")
def robot_history(request):
    limit = query_int(request, "limit", 10)
    runs = robot_runtime.get_robot_state().recent_runs(limit)
    return api_response([run.model_dump(mode="json") for run in runs], "Robot history retrieved")


@api_view("GET")
def whatsapp_status(request):
    status = robot_runtime.get_whatsapp_client().check_connection()
    return api_response(status, "WhatsApp status retrieved")


@api_view("POST")
def whatsapp_test_send(request):
    payload = parse_body(request, ProbeMessageRequest)
    outcome = robot_runtime.get_whatsapp_client().send_with_retry(payload.number, payload.message)
    data = {
        "success": outcome.success,
        "message_id": outcome.message_id,
        "attempts": outcome.attempts,
        "error": outcome.error,
    }
    if not outcome.success:
        return api_response(data, "Test message failed", status=502)
    return api_response(data, "Test message sent")
