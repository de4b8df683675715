from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
import logging

from calhook.dependencies import get_workflow
from calhook.dispatch.workflow import CalendarWorkflow
from calhook.routes.dto import WebhookRequest

# Set up logging
logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/webhook")
async def webhook(request: WebhookRequest, workflow: CalendarWorkflow = Depends(get_workflow)):
    """
    Run a calendar tool call and return its envelope.

    Flow:
    1. With tool_name: dispatch directly
    2. With only text: interpret the text first, then dispatch
    3. Unauthorized envelopes are answered with a 401
    """
    if request.tool_name is None and request.text:
        logger.info("Received natural-language webhook request")
        if not workflow.interpreter.is_configured:
            return JSONResponse(
                status_code=503,
                content={"success": False, "error": "Language service integration not configured"},
            )

        result = await workflow.process_message(request.text)
        unauthorized = bool(result.result and result.result.get("unauthorized"))
        return JSONResponse(status_code=401 if unauthorized else 200, content=result.to_dict())

    logger.info("Received webhook for tool %s", request.tool_name)
    result = await workflow.run_tool(request.tool_name, request.parameters)

    envelope = dict(result.result)
    unauthorized = envelope.pop("unauthorized", False)
    if not envelope.get("success"):
        logger.warning("Tool %s failed: %s", request.tool_name, envelope.get("error"))

    return JSONResponse(status_code=401 if unauthorized else 200, content=envelope)
