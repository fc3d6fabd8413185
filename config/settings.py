"""
SilverLine B2B - Centralized Configuration
===========================================
All environment variables and constants are loaded here.
No other module should call os.getenv() directly.
"""

import os
import sys
from dotenv import load_dotenv

load_dotenv()


# ==========================================
# 🗄️ Database
# ==========================================
DB_USER = os.getenv("DB_USER")
DB_PASSWORD = os.getenv("DB_PASSWORD")
DB_HOST = os.getenv("DB_HOST", "localhost")
DB_PORT = os.getenv("DB_PORT", "5432")
DB_NAME = os.getenv("DB_NAME")

DATABASE_URL = os.getenv("DATABASE_URL", "")

if not DATABASE_URL:
    if not all([DB_USER, DB_PASSWORD, DB_HOST, DB_NAME]):
        print("[ERROR] Critical: Database config missing in .env (DATABASE_URL or DB_USER, DB_PASSWORD, DB_HOST, DB_NAME)")
        sys.exit(1)
    DATABASE_URL = f"postgresql://{DB_USER}:{DB_PASSWORD}@{DB_HOST}:{DB_PORT}/{DB_NAME}"


# ==========================================
# 📈 Live Silver Rate Feed
# ==========================================
SILVER_FEED_URL = os.getenv("SILVER_FEED_URL", "")
SILVER_FEED_FALLBACK_URL = os.getenv("SILVER_FEED_FALLBACK_URL", "")
SILVER_FEED_TIMEOUT = float(os.getenv("SILVER_FEED_TIMEOUT") or "5")  # seconds


# ==========================================
# 🧾 Pricing & Invoicing
# ==========================================
RATE_TREND_DAYS = int(os.getenv("RATE_TREND_DAYS") or "7")
DEFAULT_HSN_CODE = os.getenv("DEFAULT_HSN_CODE", "7113")
INVOICE_PREFIX = os.getenv("INVOICE_PREFIX", "INV-SSJ")

# system_settings keys (mutable by admins at any time)
SETTING_EXTRA_CHARGES = "extra_charges"
SETTING_GST_RATE = "gst_rate"
SETTING_COMPANY_STATE_CODE = "company_state_code"

COMPANY_SETTING_KEYS = [
    "company_name", "company_address", "company_gstin",
    "company_phone", "company_email",
]
DEFAULT_COMPANY_NAME = "SilverLine B2B"


# ==========================================
# 🔧 App
# ==========================================
DEBUG = os.getenv("DEBUG", "false").lower() == "true"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
