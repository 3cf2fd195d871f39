# FastAPI Application Redirect
# This file redirects to the actual app in the presence package

from presence.main import app  # noqa: F401

# Lets uvicorn find the app when running from the repository root:
# uvicorn main:app --host 0.0.0.0 --port 8001
