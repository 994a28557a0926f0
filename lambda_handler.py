"""
AWS Lambda handler for the Partnership Engine commission API.

This is the production entry point for AWS Lambda deployments. It serves the
stateless endpoints only; opportunity endpoints need a repository and are
served by main.py (Flask app).
"""

import base64
import json
import logging

from partner_engine import CommissionProcessor
from partner_engine.calculators import CommissionCalculator
from partner_engine.config import Settings
from partner_engine.errors import EngineError
from partner_engine.output import OutputBuilder

settings = Settings.from_env()

# Configure logging
logger = logging.getLogger()
logger.setLevel(settings.log_level)

# Initialize processor (reused across warm invocations)
processor = CommissionProcessor(CommissionCalculator(partner_rates=settings.partner_rates))
output = OutputBuilder()

# CORS headers for API Gateway
CORS_HEADERS = {
    "Content-Type": "application/json",
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type,Authorization",
    "Access-Control-Allow-Methods": "GET,POST,OPTIONS",
}


def _response(status_code: int, body) -> dict:
    return {"statusCode": status_code, "headers": CORS_HEADERS, "body": json.dumps(body)}


def lambda_handler(event, context):
    """
    Main Lambda entry point.

    Handles API Gateway events for:
    - GET /health
    - GET /api
    - GET /stages
    - POST /commissions/calculate
    - OPTIONS (CORS preflight)
    """
    # Handle CORS preflight
    http_method = event.get("httpMethod") or event.get("requestContext", {}).get("http", {}).get("method", "")
    if http_method == "OPTIONS":
        return {"statusCode": 200, "headers": CORS_HEADERS, "body": ""}

    # Get path (supports both REST API and HTTP API formats)
    path = event.get("path") or event.get("rawPath", "")

    # Route to appropriate handler
    if path == "/health" and http_method == "GET":
        return handle_health()
    elif path == "/api" and http_method == "GET":
        return handle_api_info()
    elif path == "/stages" and http_method == "GET":
        return _response(200, output.stages())
    elif path == "/commissions/calculate" and http_method == "POST":
        return handle_calculate_commission(event)
    else:
        return _response(404, {"error": "Not found", "path": path})


def handle_health():
    """Health check endpoint."""
    return _response(200, {"status": "healthy", "environment": settings.environment})


def handle_api_info():
    """API information endpoint."""
    return _response(
        200,
        {
            "status": "ok",
            "message": "Partnership Engine API",
            "version": "1.0",
            "environment": settings.environment,
            "runtime": "AWS Lambda",
            "commission_types": CommissionProcessor.commission_types(),
            "endpoints": {
                "calculate_commission": "/commissions/calculate [POST]",
                "stages": "/stages [GET]",
                "health": "/health [GET]",
            },
        },
    )


def handle_calculate_commission(event):
    """Calculate a commission through the commission processor."""
    try:
        # Parse request body
        body = event.get("body", "")
        if isinstance(body, str):
            if not body:
                return _response(400, {"error": "No input data provided", "status": "failed"})
            # Handle base64 encoded body (API Gateway)
            if event.get("isBase64Encoded"):
                body = base64.b64decode(body).decode("utf-8")
            input_data = json.loads(body)
        else:
            input_data = body

        if not isinstance(input_data, dict) or not input_data:
            return _response(400, {"error": "No input data provided", "status": "failed"})

        logger.info(f"Calculating {input_data.get('commission_type', 'referral')} commission")

        result = processor.process_from_dict(input_data)

        logger.info(f"Commission calculated: {result['commission']['value']}")

        return _response(200, result)

    except json.JSONDecodeError as e:
        logger.error(f"JSON parse error: {str(e)}")
        return _response(400, {"error": f"Invalid JSON: {str(e)}", "status": "failed"})

    except EngineError as e:
        logger.error(f"Validation error: {str(e)}")
        return _response(400, {"error": str(e), "code": e.code, "status": "validation_failed"})

    except (ValueError, KeyError, TypeError) as e:
        # Missing fields, invalid types, unknown commission types
        logger.error(f"Validation error: {str(e)}")
        return _response(400, {"error": f"Validation error: {str(e)}", "status": "validation_failed"})

    except Exception as e:
        # Unexpected errors - log details but return generic message to avoid information disclosure
        logger.error(f"Unexpected processing error: {str(e)}", exc_info=True)
        return _response(500, {"error": "An unexpected error occurred during processing", "status": "failed"})
