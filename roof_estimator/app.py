"""
Flask API for the Roofing Estimator
Exposes the estimate engine, pitch lookup and chat hand-off over JSON
"""

import logging
from typing import Optional

from flask import Flask, current_app, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from roof_estimator.config import AppConfig, configure_logging, get_config
from roof_estimator.exceptions import EstimatorError
from roof_estimator.intake import handle_assistant_message
from roof_estimator.pdf_api import add_pdf_routes
from roof_estimator.pricing import PitchMatch, lookup_pitch, resolve_pitch_multiplier
from roof_estimator.quote_engine import generate_estimate
from roof_estimator.utils import project_from_payload

logger = logging.getLogger(__name__)


def _pricing():
    return current_app.config["PRICING_TABLES"]


def _json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise EstimatorError("Invalid request format", status_code=400)
    return data


def create_app(config: Optional[AppConfig] = None) -> Flask:
    """Build the Flask application"""
    config = config or get_config()
    configure_logging(config.log_level)

    app = Flask(__name__)
    app.config["ESTIMATOR"] = config
    app.config["PRICING_TABLES"] = config.load_pricing()

    if config.enable_cors:
        CORS(app)  # Frontend runs on a separate origin

    @app.errorhandler(EstimatorError)
    def handle_estimator_error(error):
        body = {'error': error.message}
        details = getattr(error, 'details', None)
        if details:
            body['details'] = details
        return jsonify(body), error.status_code or 500

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        if isinstance(error, HTTPException):
            return error
        logger.exception("Unhandled error on %s", request.path)
        return jsonify({'error': 'An unexpected error occurred. Please try again.'}), 500

    @app.route('/api/health', methods=['GET'])
    def health_check():
        """Health check endpoint"""
        return jsonify({'status': 'healthy', 'service': 'roof-estimator'})

    @app.route('/api/pricing', methods=['GET'])
    def get_pricing():
        """Active pricing tables"""
        return jsonify(_pricing().to_dict())

    @app.route('/api/pitch', methods=['POST'])
    def resolve_pitch():
        """Resolve a pitch description to its area multiplier"""
        data = _json_body()
        pitch = data.get('pitch')
        if not isinstance(pitch, str) or not pitch.strip():
            raise EstimatorError("pitch is required", status_code=400)

        match = lookup_pitch(pitch, _pricing())
        return jsonify({
            'pitch': pitch,
            'pitchMultiplier': resolve_pitch_multiplier(pitch, _pricing()),
            'matched': isinstance(match, PitchMatch),
        })

    @app.route('/api/estimates', methods=['POST'])
    def create_estimate():
        """Generate an estimate from a project payload"""
        data = _json_body()
        project = project_from_payload(data, _pricing())
        estimate = generate_estimate(project, _pricing())
        logger.info("Generated estimate %s (%s)", estimate.id, project.location_text)
        return jsonify(estimate.to_dict())

    @app.route('/api/chat/complete', methods=['POST'])
    def complete_chat_turn():
        """Turn an assistant reply into a chat response, with an estimate when ready"""
        data = _json_body()
        message = data.get('message')
        if not isinstance(message, str):
            raise EstimatorError("message is required", status_code=400)

        result = handle_assistant_message(message, _pricing())
        return jsonify(result.to_dict())

    add_pdf_routes(app)

    return app


app = create_app()


if __name__ == '__main__':
    settings = app.config["ESTIMATOR"]
    app.run(debug=settings.debug, host=settings.host, port=settings.port)
