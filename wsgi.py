"""
WSGI entry point for the office attendance service.

Usage with Gunicorn:
    gunicorn wsgi:app
"""
import os

# Production unless told otherwise
if 'FLASK_ENV' not in os.environ:
    os.environ['FLASK_ENV'] = 'production'

from attendance import create_app, init_db
from attendance.config import get_config

get_config(os.environ['FLASK_ENV'], validate=True)
app = create_app(os.environ['FLASK_ENV'])

try:
    init_db(app)
except Exception as e:
    app.logger.warning(f"Database initialization skipped or failed: {e}")

application = app

if __name__ == "__main__":
    app.run(debug=False, host='0.0.0.0', port=5000)
