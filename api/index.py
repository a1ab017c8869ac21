"""
Serverless entry point. vercel.json rewrites every incoming path to this
function, which hands the request to the student proxy's Flask app.
"""
import sys
from pathlib import Path

# student_proxy.py lives at the repo root, one level above api/
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from student_proxy import app  # noqa: E402  (picked up by the runtime as the WSGI callable)

__all__ = ["app"]
