"""
Vercel entry point: serves the RelaCollab match API through Mangum.

Routes are mounted under /api, matching the rewrite in the Vercel project.
"""
import os
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "backend"))

# Read by relacollab.main / core.database: no lifespan, no connection pool
os.environ.setdefault("VERCEL", "1")

from mangum import Mangum

from relacollab.main import create_app

app = create_app()
handler = Mangum(app, lifespan="off")
