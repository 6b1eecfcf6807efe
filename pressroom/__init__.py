"""
Pressroom - Email Template Builder for Flask Admin Consoles
===========================================================

A Flask admin module for composing marketing emails from blocks:
- Block-based editor with a live canvas and drag-to-reorder
- Table-based, inline-styled HTML export for mail clients
- Raw HTML editing mode
- Saved templates with optional mirroring to an external CRM backend

Usage:
    from pressroom import Pressroom

    app = Flask(__name__)
    Pressroom(app)
"""

import logging
import os

__version__ = '0.1.0'
__author__ = 'Laurence Stephan'

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = {
    'brand_name': None,
    'features': {
        'email_builder': True,
    },
}


class Pressroom:
    """Flask extension that wires config, storage and the feature blueprints"""

    def __init__(self, app=None, config=None):
        self._config = {}
        self._registered = []
        if app is not None:
            self.init_app(app, config)

    def init_app(self, app, config=None):
        self._config = self._merge_config(config or {})

        from .core import Config
        for key in ('DB_DIR', 'TEMPLATES_DB', 'ANALYTICS_DB', 'EMAIL_TEMPLATE_TITLE',
                    'EMAIL_TEMPLATE_BACKEND_URL', 'EMAIL_TEMPLATE_BACKEND_TOKEN',
                    'EMAIL_BUILDER_SOCIAL_ICONS'):
            value = getattr(Config, key)
            app.config.setdefault(key, dict(value) if isinstance(value, dict) else value)
        app.config.setdefault('EMAIL_BRAND_NAME', self._config['brand_name'] or Config.EMAIL_BRAND_NAME)

        self._setup_database_dir(app)
        self._register_modules(app)

        @app.context_processor
        def inject_brand_name():
            return {'brand_name': app.config.get('EMAIL_BRAND_NAME') or Config.EMAIL_BRAND_NAME}

        app.extensions['pressroom'] = self
        logger.info(f"Pressroom initialised with modules: {', '.join(self._registered)}")

    def _merge_config(self, config):
        merged = dict(DEFAULT_CONFIG)
        merged.update({k: v for k, v in config.items() if k != 'features'})
        merged['features'] = dict(DEFAULT_CONFIG['features'])
        merged['features'].update(config.get('features', {}))
        return merged

    def _setup_database_dir(self, app):
        db_dir = app.config.get('DB_DIR')
        if db_dir:
            os.makedirs(db_dir, exist_ok=True)

    def _register_modules(self, app):
        features = self._config['features']

        if features.get('email_builder'):
            from .modules.email_builder import email_builder_bp
            from .modules.email_builder.models import init_templates_db
            app.register_blueprint(email_builder_bp)
            with app.app_context():
                init_templates_db()
            self._registered.append('email_builder')

    def get_registered_modules(self):
        return list(self._registered)


__all__ = ['Pressroom', '__version__']
