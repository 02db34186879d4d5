"""
Entry point.

    gunicorn run:app          # production
    python run.py             # development server
"""
from yourbuzzfeed import create_app
from yourbuzzfeed.config import API_HOST, API_PORT, API_DEBUG

app = create_app()

if __name__ == '__main__':
    app.run(host=API_HOST, port=API_PORT, debug=API_DEBUG)
