"""Request-scoped session handling for the web front end."""

from functools import wraps
from flask import current_app, flash, g, redirect, request, url_for

from ..api.client import EventAPIClient
from ..auth import FlaskSessionCredentialStore, SessionManager

def create_api_client() -> EventAPIClient:
    """Create an API client from the application configuration."""
    return EventAPIClient(
        base_url=current_app.config['API_BASE_URL'],
        timeout=current_app.config['API_TIMEOUT'],
        transport=current_app.config.get('API_TRANSPORT')
    )

async def load_session():
    """Restore the browser's session before every request."""
    g.auth = SessionManager(create_api_client(), FlaskSessionCredentialStore())
    await g.auth.restore_session()

def close_session(exception=None):
    auth = g.pop('auth', None)
    if auth is not None:
        auth.close()

def inject_session():
    """Expose the session to templates."""
    auth = g.get('auth')
    return {
        'session_info': auth.session if auth else None,
        'current_user': auth.current_user if auth else None
    }

def login_required(view):
    """Redirect anonymous users to the login page."""
    @wraps(view)
    async def wrapped(*args, **kwargs):
        if not g.auth.session.is_authenticated:
            flash('Please log in to continue.')
            return redirect(url_for('auth.login', next=request.full_path.rstrip('?')))
        return await view(*args, **kwargs)
    return wrapped

def init_app(app):
    app.before_request(load_session)
    app.teardown_request(close_session)
    app.context_processor(inject_session)
