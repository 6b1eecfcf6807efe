"""
Email Template Models
=====================

Database schema and CRUD operations for saved email templates.
Each template stores the compiled HTML (the field used when sending) and,
for templates built with the block editor, the blocks as JSON so they can
be re-opened for editing.
"""

import json
import logging

from pressroom.core import Database, db_log, get_config_value

logger = logging.getLogger(__name__)


def _db_log(level, message, details=None):
    """Log to framework's persistent DB logger"""
    try:
        db_log(level, 'email_templates', message, details)
    except Exception as e:
        logger.warning(f"Persistent log write failed: {e}")


def get_db_config():
    """Get the templates database path from config or environment"""
    return get_config_value('TEMPLATES_DB', 'email_templates.db')


def init_templates_db():
    """Create the email_templates table"""
    try:
        db_path = Database.ensure_parent_dir(get_db_config())

        with Database.connect(db_path) as conn:
            cursor = conn.cursor()

            cursor.execute('''
                CREATE TABLE IF NOT EXISTS email_templates (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL,
                    subject TEXT NOT NULL DEFAULT '',
                    content TEXT NOT NULL DEFAULT '',
                    blocks TEXT,
                    is_default BOOLEAN DEFAULT FALSE,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            ''')

            conn.commit()
            logger.info("Email templates table created/verified successfully")

    except Exception as e:
        logger.error(f"Error initializing email templates database: {e}")
        _db_log('error', 'Failed to init email templates DB', {'error': str(e)})
        raise


def get_template(template_id):
    """Get a single template by ID"""
    try:
        with Database.connect(get_db_config()) as conn:
            conn.row_factory = _dict_factory
            cursor = conn.cursor()
            cursor.execute('SELECT * FROM email_templates WHERE id = ?', (template_id,))
            row = cursor.fetchone()
            if row:
                return _parse_row(row)
            return None
    except Exception as e:
        logger.error(f"Error getting template {template_id}: {e}")
        _db_log('error', f'Error getting template {template_id}', {'error': str(e)})
        return None


def get_all_templates(search=None, default_only=False):
    """Get templates, defaults first, then most recently updated.

    Args:
        search: optional case-insensitive match against name or subject
        default_only: only return the default template
    """
    try:
        query = 'SELECT * FROM email_templates'
        conditions = []
        params = []
        if search:
            pattern = f"%{search.strip().lower()}%"
            conditions.append('(LOWER(name) LIKE ? OR LOWER(subject) LIKE ?)')
            params.extend([pattern, pattern])
        if default_only:
            conditions.append('is_default = 1')
        if conditions:
            query += ' WHERE ' + ' AND '.join(conditions)
        query += ' ORDER BY is_default DESC, updated_at DESC, id DESC'

        with Database.connect(get_db_config()) as conn:
            conn.row_factory = _dict_factory
            cursor = conn.cursor()
            cursor.execute(query, params)
            return [_parse_row(row) for row in cursor.fetchall()]
    except Exception as e:
        logger.error(f"Error getting all templates: {e}")
        _db_log('error', 'Error getting all templates', {'error': str(e)})
        return []


def save_template(data):
    """Create or update a template. Returns the template ID.

    data['blocks'] is a list of block dicts, or None for templates written
    in the raw HTML editor.
    """
    try:
        init_templates_db()

        with Database.connect(get_db_config()) as conn:
            cursor = conn.cursor()
            template_id = data.get('id')

            blocks = data.get('blocks')
            blocks_json = json.dumps(blocks) if blocks is not None else None
            is_default = bool(data.get('is_default', False))

            if is_default:
                cursor.execute('UPDATE email_templates SET is_default = 0 WHERE is_default = 1')

            if template_id:
                cursor.execute('''
                    UPDATE email_templates
                    SET name = ?, subject = ?, content = ?, blocks = ?, is_default = ?,
                        updated_at = CURRENT_TIMESTAMP
                    WHERE id = ?
                ''', (
                    data.get('name', ''),
                    data.get('subject', ''),
                    data.get('content', ''),
                    blocks_json,
                    is_default,
                    template_id
                ))
                if cursor.rowcount == 0:
                    conn.rollback()
                    logger.warning(f"Template {template_id} not found for update")
                    return None
            else:
                cursor.execute('''
                    INSERT INTO email_templates (name, subject, content, blocks, is_default)
                    VALUES (?, ?, ?, ?, ?)
                ''', (
                    data.get('name', ''),
                    data.get('subject', ''),
                    data.get('content', ''),
                    blocks_json,
                    is_default
                ))
                template_id = cursor.lastrowid

            conn.commit()
            logger.info(f"Saved template {template_id}: {data.get('name')}")
            return template_id

    except Exception as e:
        logger.error(f"Error saving template: {e}")
        _db_log('error', 'Error saving template', {'error': str(e)})
        return None


def delete_template(template_id):
    """Delete a template. Returns False when it does not exist."""
    try:
        with Database.connect(get_db_config()) as conn:
            cursor = conn.cursor()
            cursor.execute('DELETE FROM email_templates WHERE id = ?', (template_id,))
            deleted = cursor.rowcount > 0
            conn.commit()
            if deleted:
                logger.info(f"Deleted template {template_id}")
            return deleted
    except Exception as e:
        logger.error(f"Error deleting template {template_id}: {e}")
        _db_log('error', f'Error deleting template {template_id}', {'error': str(e)})
        return False


def duplicate_template(template_id):
    """Copy a template under "<name> (Copy)". The copy is never the default.

    Returns the new template ID, or None when the original does not exist.
    """
    original = get_template(template_id)
    if not original:
        return None

    copy_id = save_template({
        'name': f"{original['name']} (Copy)",
        'subject': original['subject'],
        'content': original['content'],
        'blocks': original['blocks'],
        'is_default': False,
    })
    if copy_id:
        _db_log('info', f"Template duplicated: {original['name']}", {'id': template_id, 'copy_id': copy_id})
    return copy_id


def _dict_factory(cursor, row):
    return {col[0]: row[idx] for idx, col in enumerate(cursor.description)}


def _parse_row(d):
    """Decode the blocks JSON column and normalise is_default"""
    if isinstance(d.get('blocks'), str):
        try:
            d['blocks'] = json.loads(d['blocks'])
        except (json.JSONDecodeError, TypeError):
            logger.warning(f"Template {d.get('id')} has unreadable blocks JSON")
            d['blocks'] = None
    d['is_default'] = bool(d.get('is_default'))
    return d
