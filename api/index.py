"""
Vercel serverless entry point.

Vercel picks up the `app` variable (a WSGI app) from api/index.py, so the
Flask app built in server.py is re-exported here unchanged.
"""

import sys
import os

# make the project root importable
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from server import app  # noqa: F401,E402
