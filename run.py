#!/usr/bin/env python3
"""
Entry point for the Registration Service.

Usage:
    python run.py

Environment Variables:
    FLASK_ENV: development, production or testing (default: development)
    PORT: Port to run on (default: 5000)
    LOG_LEVEL: overrides the config's log level
"""
import logging
import os

from registration.app import create_app


def run_registration_service():
    """Run the registration API."""
    app = create_app()
    logging.basicConfig(
        level=os.getenv('LOG_LEVEL', app.config.get('LOG_LEVEL', 'INFO')),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )

    port = int(os.getenv('PORT', 5000))
    debug = os.getenv('FLASK_ENV', 'development') == 'development'

    print(f"Starting Registration Service on port {port}...")
    app.run(host='0.0.0.0', port=port, debug=debug)


if __name__ == '__main__':
    run_registration_service()
