"""
BLE Security Mapper - passive Bluetooth Low Energy risk analysis.

Flask application factory and command line entry point.
"""

from __future__ import annotations

import argparse

from flask import Flask, Response, jsonify

import config
from utils.logging import app_logger as logger


def create_app() -> Flask:
    """Create the Flask application with every blueprint registered."""
    config.configure_logging()

    app = Flask(__name__)

    from routes import register_blueprints
    register_blueprints(app)

    @app.route('/health')
    def health() -> Response:
        return jsonify({'status': 'ok', 'version': config.VERSION})

    logger.debug("Application created")
    return app


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description='BLE Security Mapper - passive BLE risk analysis',
        epilog='Environment variables: SECMAP_HOST, SECMAP_PORT, SECMAP_DEBUG, SECMAP_LOG_LEVEL'
    )
    parser.add_argument(
        '-p', '--port',
        type=int,
        default=config.PORT,
        help=f'Port to run server on (default: {config.PORT})'
    )
    parser.add_argument(
        '-H', '--host',
        default=config.HOST,
        help=f'Host to bind to (default: {config.HOST})'
    )
    parser.add_argument(
        '-d', '--debug',
        action='store_true',
        default=config.DEBUG,
        help='Enable debug mode'
    )
    parser.add_argument(
        '--scan',
        action='store_true',
        help='Start the passive scanner on launch'
    )
    args = parser.parse_args()

    app = create_app()

    if args.scan:
        from utils.security import get_passive_scanner
        if not get_passive_scanner().start(config.SCAN_DURATION):
            logger.error("Passive scanner could not be started")

    logger.info(f"Serving on http://{args.host}:{args.port}")
    app.run(host=args.host, port=args.port, debug=args.debug, threaded=config.THREADED)


if __name__ == '__main__':
    main()
