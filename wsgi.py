"""
WSGI entry point for the OKR tracker API.

Usage:
    gunicorn wsgi:app
    flask --app wsgi db init       # first time only (creates migrations/)
    flask --app wsgi db migrate -m "description"
    flask --app wsgi db upgrade
"""

from app import create_app

app = create_app()

if __name__ == "__main__":
    app.run(port=5000)
