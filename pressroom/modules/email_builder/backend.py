"""
Template Backend Client
=======================

Mirrors saved templates to an external CRM backend over HTTP.
Disabled unless EMAIL_TEMPLATE_BACKEND_URL is configured. A push is a
synchronous request made inside the save request (bounded by TIMEOUT).
It is best-effort: a failure is logged and reported in the result dict,
never raised and never retried.
"""

import logging

import requests

from pressroom.core import db_log, get_config_value

logger = logging.getLogger(__name__)

TIMEOUT = 15


class TemplateBackendClient:
    """Pushes template payloads to {EMAIL_TEMPLATE_BACKEND_URL}/templates"""

    def __init__(self, base_url=None, token=None, session=None):
        self.base_url = (base_url or '').rstrip('/')
        self.token = token
        self.session = session or requests.Session()

    @classmethod
    def from_config(cls):
        return cls(
            base_url=get_config_value('EMAIL_TEMPLATE_BACKEND_URL', ''),
            token=get_config_value('EMAIL_TEMPLATE_BACKEND_TOKEN', ''),
        )

    @property
    def enabled(self):
        return bool(self.base_url)

    def _headers(self):
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def push_template(self, template_id, payload, created=False):
        """
        Send one saved template to the backend.

        Args:
            template_id: local template ID
            payload: dict with name, subject, content, blocks, is_default
            created: POST a new template instead of PUT-ing an existing one

        Returns:
            dict with {success, status, error}
        """
        if not self.enabled:
            return {'success': False, 'status': None, 'error': 'EMAIL_TEMPLATE_BACKEND_URL not configured'}

        body = dict(payload, id=template_id)
        try:
            if created:
                resp = self.session.post(
                    f"{self.base_url}/templates", headers=self._headers(), json=body, timeout=TIMEOUT,
                )
            else:
                resp = self.session.put(
                    f"{self.base_url}/templates/{template_id}", headers=self._headers(), json=body, timeout=TIMEOUT,
                )
            resp.raise_for_status()
            logger.info(f"Pushed template {template_id} to backend ({resp.status_code})")
            return {'success': True, 'status': resp.status_code, 'error': ''}
        except requests.RequestException as e:
            error_detail = ''
            status = None
            if getattr(e, 'response', None) is not None:
                error_detail = e.response.text
                status = e.response.status_code
            logger.error(f"Template backend push failed for {template_id}: {e}")
            db_log('error', 'email_templates', 'Template backend push failed', {
                'template_id': template_id, 'error': str(e), 'response': error_detail,
            })
            return {'success': False, 'status': status, 'error': f'Backend error: {e} {error_detail}'.strip()}
