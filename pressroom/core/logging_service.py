"""
Centralized logging service for the Pressroom admin console.
Provides structured logging with database storage and easy integration.
"""

import json
import logging
from datetime import datetime
from flask import request, has_request_context, session
from .database import Database
from .config import get_config_value

console_logger = logging.getLogger(__name__)


class LoggingService:
    """Centralized logging service for application-wide logging"""

    @staticmethod
    def _db_path():
        return Database.ensure_parent_dir(get_config_value('ANALYTICS_DB'))

    @staticmethod
    def _ensure_logs_table():
        """Ensure the app_logs table exists"""
        try:
            with Database.connect(LoggingService._db_path()) as conn:
                cursor = conn.cursor()
                cursor.execute("""
                    CREATE TABLE IF NOT EXISTS app_logs (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        timestamp TEXT NOT NULL,
                        level TEXT NOT NULL,
                        source TEXT NOT NULL,
                        message TEXT NOT NULL,
                        details TEXT,
                        ip_address TEXT,
                        user_agent TEXT,
                        request_path TEXT,
                        user_id TEXT
                    )
                """)

                cursor.execute("""
                    CREATE INDEX IF NOT EXISTS idx_logs_timestamp
                    ON app_logs(timestamp DESC)
                """)
                cursor.execute("""
                    CREATE INDEX IF NOT EXISTS idx_logs_source
                    ON app_logs(source)
                """)

                conn.commit()
        except Exception as e:
            console_logger.error(f"Failed to ensure logs table: {e}")

    @staticmethod
    def _get_request_context():
        """Extract request context information"""
        if not has_request_context():
            return None, None, None, None

        try:
            ip_address = request.headers.get('X-Forwarded-For', request.remote_addr)
            if ip_address and ',' in ip_address:
                ip_address = ip_address.split(',')[0].strip()

            user_agent = request.headers.get('User-Agent', '')
            admin_id = session.get('admin_id')
            return ip_address, user_agent, request.path, admin_id
        except Exception:
            return None, None, None, None

    @staticmethod
    def log(level, source, message, details=None, user_id=None):
        """
        Log a message to the database

        Args:
            level (str): Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            source (str): Source component (email_builder, templates, etc.)
            message (str): Main log message
            details (str/dict): Additional details (will be JSON-encoded if dict)
            user_id (str): Optional user identifier, defaults to the admin in session
        """
        try:
            LoggingService._ensure_logs_table()

            ip_address, user_agent, request_path, admin_id = LoggingService._get_request_context()
            if user_id is None and admin_id is not None:
                user_id = str(admin_id)

            if isinstance(details, dict):
                details = json.dumps(details, indent=2, default=str)

            timestamp = datetime.now().isoformat()

            with Database.connect(LoggingService._db_path()) as conn:
                cursor = conn.cursor()
                cursor.execute("""
                    INSERT INTO app_logs
                    (timestamp, level, source, message, details, ip_address, user_agent, request_path, user_id)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """, (
                    timestamp, level.upper(), source, message, details,
                    ip_address, user_agent, request_path, user_id
                ))
                conn.commit()

        except Exception as e:
            # Fallback to console logging if database fails
            console_logger.info(f"[{level.upper()}] [{source}] {message}")
            if details:
                console_logger.info(f"Details: {details}")
            console_logger.warning(f"Logging service error: {e}")

    @staticmethod
    def error(source, message, details=None, user_id=None):
        """Log error message"""
        LoggingService.log('ERROR', source, message, details, user_id)

    @staticmethod
    def log_error_with_traceback(source, error, details=None):
        """Log error with full traceback"""
        import traceback
        error_details = {
            'error_type': type(error).__name__,
            'error_message': str(error),
            'traceback': traceback.format_exc()
        }
        if details:
            error_details['additional_details'] = details

        LoggingService.error(source, f"Exception occurred: {type(error).__name__}", error_details)

    @staticmethod
    def get_recent_logs(source=None, limit=50):
        """Return the most recent log rows as dicts, newest first"""
        try:
            LoggingService._ensure_logs_table()
            with Database.connect(LoggingService._db_path()) as conn:
                cursor = conn.cursor()
                if source:
                    cursor.execute(
                        'SELECT timestamp, level, source, message, details FROM app_logs '
                        'WHERE source = ? ORDER BY id DESC LIMIT ?',
                        (source, limit)
                    )
                else:
                    cursor.execute(
                        'SELECT timestamp, level, source, message, details FROM app_logs '
                        'ORDER BY id DESC LIMIT ?',
                        (limit,)
                    )
                columns = ['timestamp', 'level', 'source', 'message', 'details']
                return [dict(zip(columns, row)) for row in cursor.fetchall()]
        except Exception as e:
            console_logger.error(f"Failed to read logs: {e}")
            return []


def db_log(level, source, message, details=None):
    """Shortcut used by modules to write to the persistent log"""
    LoggingService.log(level, source, message, details)

