"""
SilverLine B2B - Template Configuration
========================================
Jinja2 templates setup with custom filters, plus the system-settings readers
shared by routes and services.
"""

from pathlib import Path

from fastapi.templating import Jinja2Templates
from sqlalchemy.orm import Session

from common.helpers import format_inr, format_weight, format_weight_gm

# Initialize templates
TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"
templates = Jinja2Templates(directory=str(TEMPLATE_DIR))


# ==========================================
# System Settings
# ==========================================

def get_settings_map(db: Session, keys) -> dict:
    """Fetch several settings in one query. Missing keys are absent from the result."""
    from modules.admin.models import SystemSetting
    rows = db.query(SystemSetting).filter(SystemSetting.key.in_(list(keys))).all()
    return {row.key: row.value for row in rows}


def set_setting(db: Session, key: str, value, description: str = None):
    """Upsert a system setting. Caller must commit."""
    from modules.admin.models import SystemSetting
    setting = db.query(SystemSetting).filter(SystemSetting.key == key).first()
    if setting:
        setting.value = str(value)
        if description is not None:
            setting.description = description
    else:
        setting = SystemSetting(key=key, value=str(value), description=description)
        db.add(setting)
    return setting


# ==========================================
# Register Filters & Globals
# ==========================================

# Filters (usage in template: {{ value | inr }})
templates.env.filters["inr"] = format_inr
templates.env.filters["weight_format"] = format_weight
templates.env.filters["weight_gm"] = format_weight_gm
