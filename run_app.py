#!/usr/bin/env python3
"""
Simple runner script for the Roofing Estimator API
"""

from roof_estimator.app import app

if __name__ == '__main__':
    settings = app.config["ESTIMATOR"]
    print("Starting Roofing Estimator...")
    print(f"Server will be available at: http://localhost:{settings.port}")
    print("API endpoints:")
    print("   - GET  /api/health")
    print("   - GET  /api/pricing")
    print("   - POST /api/pitch")
    print("   - POST /api/estimates")
    print("   - POST /api/estimates/pdf")
    print("   - POST /api/chat/complete")
    print("\nStarting Flask server...")

    app.run(debug=settings.debug, host=settings.host, port=settings.port)
