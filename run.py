"""
Application entry point
Starts the verification API
"""
import os

from liveguard.web import create_app

app = create_app()

if __name__ == '__main__':
    host = os.getenv('FLASK_HOST', '0.0.0.0')
    port = int(os.getenv('FLASK_PORT', 5000))
    debug = os.getenv('FLASK_DEBUG', 'False').lower() in ('true', '1', 'yes')

    app.logger.info("Starting Flask application on %s:%s", host, port)
    app.logger.info("Debug mode: %s", debug)

    app.run(
        host=host,
        port=port,
        debug=debug,
        threaded=True
    )
