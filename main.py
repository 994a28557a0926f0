from flask import Flask, request, jsonify
from flask_cors import CORS
from werkzeug.exceptions import HTTPException
from partner_engine import CommissionProcessor, InMemoryOpportunityRepository, OpportunityService, StageEngine
from partner_engine.calculators import CommissionCalculator
from partner_engine.config import Settings
from partner_engine.errors import EngineError, OpportunityNotFound
from partner_engine.models import OpportunityCreateRequest, StageChangeRequest
from partner_engine.output import OutputBuilder
import logging

settings = Settings.from_env()

# Configure logging
logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)


def create_app(settings: Settings = settings, service: OpportunityService | None = None) -> Flask:
    app = Flask(__name__)

    # Enable CORS for all routes (the dashboard calls the API from another origin)
    CORS(app)

    processor = CommissionProcessor(CommissionCalculator(partner_rates=settings.partner_rates))
    if service is None:
        service = OpportunityService(
            InMemoryOpportunityRepository(),
            StageEngine(policy=settings.probability_policy),
        )
    output = OutputBuilder()

    @app.errorhandler(OpportunityNotFound)
    def handle_not_found(e):
        logger.info(f"Not found: {e}")
        return jsonify({"error": str(e), "code": e.code, "status": "not_found"}), 404

    @app.errorhandler(EngineError)
    def handle_engine_error(e):
        logger.error(f"Validation error: {str(e)}")
        return jsonify({"error": str(e), "code": e.code, "status": "validation_failed"}), 400

    @app.errorhandler(KeyError)
    @app.errorhandler(TypeError)
    @app.errorhandler(ValueError)
    def handle_bad_request(e):
        # Missing fields, invalid types, unknown enum values
        logger.error(f"Validation error: {str(e)}")
        return jsonify({"error": f"Validation error: {str(e)}", "code": "bad_request", "status": "validation_failed"}), 400

    @app.route("/api", methods=["GET"])
    def api_info():
        """API information endpoint"""
        return jsonify({
            "status": "ok",
            "message": "Partnership Engine API",
            "version": "1.0",
            "environment": settings.environment,
            "probability_policy": settings.probability_policy.value,
            "commission_types": CommissionProcessor.commission_types(),
            "endpoints": {
                "calculate_commission": "/commissions/calculate [POST]",
                "stages": "/stages [GET]",
                "opportunities": "/opportunities [GET, POST]",
                "opportunity": "/opportunities/<id> [GET]",
                "change_stage": "/opportunities/<id>/stage [PATCH]",
                "override_probability": "/opportunities/<id>/probability [PATCH]",
                "stage_history": "/opportunities/<id>/history [GET]",
                "pipeline_summary": "/pipeline/summary [GET]",
                "health": "/health [GET]"
            }
        }), 200

    @app.route("/health", methods=["GET"])
    def health():
        """Health check for monitoring"""
        return jsonify({"status": "healthy"}), 200

    @app.route("/stages", methods=["GET"])
    def stages():
        return jsonify(output.stages()), 200

    @app.route("/commissions/calculate", methods=["POST"])
    def calculate_commission():
        """
        Calculate a commission (flat, partner or tiered), optionally split
        """
        input_data = _json_body()
        if input_data is None:
            return _no_input()

        logger.info(f"Calculating {input_data.get('commission_type', 'referral')} commission")
        result = processor.process_from_dict(input_data)
        return jsonify(result), 200

    @app.route("/opportunities", methods=["GET"])
    def list_opportunities():
        return jsonify([output.opportunity(opp) for opp in service.list()]), 200

    @app.route("/opportunities", methods=["POST"])
    def create_opportunity():
        input_data = _json_body()
        if input_data is None:
            return _no_input()

        create_request = OpportunityCreateRequest.from_dict(input_data)
        opportunity = service.create(create_request, actor_id=input_data["actor_id"])
        return jsonify(output.opportunity(opportunity)), 201

    @app.route("/opportunities/<opportunity_id>", methods=["GET"])
    def get_opportunity(opportunity_id):
        return jsonify(output.opportunity(service.get(opportunity_id))), 200

    @app.route("/opportunities/<opportunity_id>/stage", methods=["PATCH"])
    def change_stage(opportunity_id):
        input_data = _json_body()
        if input_data is None:
            return _no_input()

        change = service.change_stage(opportunity_id, StageChangeRequest.from_dict(input_data))
        return jsonify(output.stage_change(change)), 200

    @app.route("/opportunities/<opportunity_id>/probability", methods=["PATCH"])
    def override_probability(opportunity_id):
        input_data = _json_body()
        if input_data is None:
            return _no_input()

        opportunity = service.override_probability(opportunity_id, input_data["probability"])
        return jsonify(output.opportunity(opportunity)), 200

    @app.route("/opportunities/<opportunity_id>/history", methods=["GET"])
    def stage_history(opportunity_id):
        return jsonify([output.history_entry(entry) for entry in service.history(opportunity_id)]), 200

    @app.route("/pipeline/summary", methods=["GET"])
    def pipeline_summary():
        return jsonify(output.pipeline_summary(service.pipeline_summary())), 200

    @app.errorhandler(Exception)
    def handle_unexpected(e):
        if isinstance(e, HTTPException):
            return e

        # Unexpected errors - log details but return a generic message
        logger.error(f"Processing error: {str(e)}", exc_info=True)
        return jsonify({
            "error": "An unexpected error occurred during processing",
            "status": "failed"
        }), 500

    return app


def _json_body():
    data = request.get_json(force=True, silent=True)
    return data if isinstance(data, dict) and data else None


def _no_input():
    return jsonify({
        "error": "No input data provided",
        "status": "failed"
    }), 400


app = create_app()


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=settings.port)
