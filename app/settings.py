"""
Runtime settings for the feedback analysis dashboard.

Values come from the environment (a local .env file is loaded first), so the
same code runs against a local backend or the hosted one:

    FEEDBACK_API_URL=https://feedback-analysis-backend.example.org
    FEEDBACK_BULK_WORKERS=8
"""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

ROOT_DIR = Path(__file__).parent.parent

# ---------------------------------------------------------------------------
# Backend
# ---------------------------------------------------------------------------

API_BASE_URL   = os.getenv("FEEDBACK_API_URL", "http://localhost:5000").rstrip("/")
API_TIMEOUT    = float(os.getenv("FEEDBACK_API_TIMEOUT", "30"))
REPORT_TIMEOUT = float(os.getenv("FEEDBACK_REPORT_TIMEOUT", "120"))
BULK_WORKERS   = max(1, int(os.getenv("FEEDBACK_BULK_WORKERS", "4")))

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

LOG_DIR   = Path(os.getenv("FEEDBACK_LOG_DIR", str(ROOT_DIR / "logs")))
LOG_FILE  = LOG_DIR / "dashboard.log"
LOG_LEVEL = os.getenv("FEEDBACK_LOG_LEVEL", "INFO").upper()

# ---------------------------------------------------------------------------
# UI
# ---------------------------------------------------------------------------

PORTAL_TITLE = "Student Feedback Analysis Portal"
INSTITUTION  = "Kalasalingam Academy of Research and Education"
OFFICE       = "Office of IQAC, KARE"
LOGO_URL     = "https://www.kalasalingam.ac.in/wp-content/uploads/2022/02/Logo.png"
