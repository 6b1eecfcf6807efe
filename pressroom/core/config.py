import os
from dotenv import load_dotenv

load_dotenv(override=True)

class Config:
    """
    Base configuration for the Pressroom framework.
    Projects should provide database paths via environment variables.
    """
    # Get DB_DIR from environment, or use a default if not set
    DB_DIR = os.getenv('DB_DIR', os.path.join(os.getcwd(), 'databases'))

    # Database paths - use environment variables or fallback to DB_DIR
    TEMPLATES_DB = os.getenv('TEMPLATES_DB', os.path.join(DB_DIR, "email_templates.db"))
    ANALYTICS_DB = os.getenv('ANALYTICS_DB', os.path.join(DB_DIR, "analytics_log.db"))

    # Email builder settings
    EMAIL_BRAND_NAME = os.getenv('EMAIL_BRAND_NAME', 'Newsletter')
    EMAIL_TEMPLATE_TITLE = os.getenv('EMAIL_TEMPLATE_TITLE', 'Email Template')

    # External CRM backend that mirrors saved templates (optional)
    EMAIL_TEMPLATE_BACKEND_URL = os.getenv('EMAIL_TEMPLATE_BACKEND_URL')
    EMAIL_TEMPLATE_BACKEND_TOKEN = os.getenv('EMAIL_TEMPLATE_BACKEND_TOKEN')

    # Per-platform social icon image URLs, e.g. {'facebook': 'https://.../fb.png'}
    EMAIL_BUILDER_SOCIAL_ICONS = {}

    # Auth blueprint name - projects can override this if they register their login page elsewhere
    PRESSROOM_LOGIN_ENDPOINT = os.getenv("PRESSROOM_LOGIN_ENDPOINT", "dashboard.admin_page")


def get_config_value(key, default=None):
    """Get config value: app.config > Config class > env var."""
    try:
        from flask import current_app
        val = current_app.config.get(key)
        if val:
            return val
    except RuntimeError:
        pass
    if hasattr(Config, key):
        val = getattr(Config, key)
        if val:
            return val
    return os.getenv(key, default)
