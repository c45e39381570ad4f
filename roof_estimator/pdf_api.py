"""
API Endpoints for PDF Generation
"""

import io
import logging

from flask import Flask, current_app, jsonify, request, send_file

from roof_estimator.exceptions import EstimatorError
from roof_estimator.models.estimate import Estimate
from roof_estimator.pdf_generator import EstimatePDFGenerator
from roof_estimator.quote_engine import generate_estimate
from roof_estimator.utils import project_from_payload

logger = logging.getLogger(__name__)


def _estimate_from_request(data) -> Estimate:
    """Accept either a full estimate or a bare project under 'project'"""
    if 'lineItems' in data:
        try:
            return Estimate.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            raise EstimatorError(f"Invalid estimate data: {e}", status_code=400) from e

    if 'project' in data:
        tables = current_app.config["PRICING_TABLES"]
        project = project_from_payload(data['project'], tables)
        return generate_estimate(project, tables)

    raise EstimatorError("estimate or project required", status_code=400)


def add_pdf_routes(app: Flask):
    """
    Add PDF generation routes to Flask app
    """

    @app.route('/api/estimates/pdf', methods=['POST'])
    def generate_estimate_pdf():
        """
        Generate a PDF from estimate data sent in the request body

        Request body:
            either an estimate as returned by POST /api/estimates, or
            {
                "project": {...project data...},
                "companyName": "Optional",
                "clientName": "Optional"
            }

        Returns:
            PDF file download
        """
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            return jsonify({'error': 'Invalid request format'}), 400

        estimate = _estimate_from_request(data)
        pdf_bytes = EstimatePDFGenerator(
            estimate,
            company_name=data.get('companyName'),
            company_phone=data.get('companyPhone'),
            company_email=data.get('companyEmail'),
            client_name=data.get('clientName'),
        ).generate_bytes()

        logger.info("Rendered PDF for estimate %s", estimate.id)
        return send_file(
            io.BytesIO(pdf_bytes),
            mimetype='application/pdf',
            as_attachment=True,
            download_name=f"Roofing_Estimate_{estimate.id}.pdf"
        )
