import os
import shutil
import tempfile

import pytest
from flask import Flask

from pressroom import Pressroom
from pressroom.modules.email_builder.blocks import Block, BlockType


@pytest.fixture
def tmp_db_dir():
    """Create a temporary directory for test databases, cleaned up after."""
    d = tempfile.mkdtemp(prefix="pressroom-test-")
    yield d
    shutil.rmtree(d, ignore_errors=True)


def make_app(db_dir):
    app = Flask(__name__)
    app.config["TESTING"] = True
    app.config["SECRET_KEY"] = "test-secret"
    app.config["DB_DIR"] = db_dir
    app.config["TEMPLATES_DB"] = os.path.join(db_dir, "email_templates.db")
    app.config["ANALYTICS_DB"] = os.path.join(db_dir, "analytics.db")
    app.config["EMAIL_TEMPLATE_BACKEND_URL"] = None
    return app


@pytest.fixture
def app(tmp_db_dir):
    """Flask app with Pressroom registered against temporary databases."""
    app = make_app(tmp_db_dir)
    Pressroom(app)
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_client(client):
    """Test client with an admin session."""
    with client.session_transaction() as sess:
        sess["admin_id"] = 1
    return client


@pytest.fixture
def abcd():
    """Four text blocks with readable ids A-D."""
    return [
        Block(id=letter, type=BlockType.TEXT, content={"html": f"<p>{letter}</p>"}, settings={})
        for letter in "ABCD"
    ]
