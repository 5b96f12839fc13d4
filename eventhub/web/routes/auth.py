"""Login, registration and profile pages."""

from flask import Blueprint, current_app, flash, g, redirect, render_template, request, url_for

from ...errors import AuthError, EventHubError
from ...utils.event_filter import FilterCriteria, filter_events
from ..context import login_required

# Create the blueprint
auth_bp = Blueprint('auth', __name__)

def safe_next(default_endpoint: str = 'events.dashboard') -> str:
    """Return the ?next= target if it stays on this site."""
    target = request.args.get('next') or request.form.get('next') or ''
    if target.startswith('/') and not target.startswith('//'):
        return target
    return url_for(default_endpoint)

@auth_bp.route('/login', methods=['GET', 'POST'])
async def login():
    """Render and handle the login form."""
    if g.auth.session.is_authenticated:
        return redirect(safe_next())

    if request.method == 'POST':
        email = request.form.get('email', '').strip()
        password = request.form.get('password', '')
        if not email or not password:
            flash('Email and password are required.')
            return render_template('auth/login.html', email=email), 400
        try:
            await g.auth.login(email, password)
        except AuthError as e:
            flash(e.message or 'Invalid credentials.')
            return render_template('auth/login.html', email=email), 401
        except EventHubError as e:
            current_app.logger.error(f"Login failed: {e}")
            flash('The event service is unavailable. Please try again later.')
            return render_template('auth/login.html', email=email), 503
        return redirect(safe_next())

    return render_template('auth/login.html', email='')

@auth_bp.route('/register', methods=['GET', 'POST'])
async def register():
    """Render and handle the registration form."""
    if g.auth.session.is_authenticated:
        return redirect(url_for('events.dashboard'))

    if request.method == 'POST':
        fields = {
            'name': request.form.get('name', '').strip(),
            'email': request.form.get('email', '').strip(),
            'password': request.form.get('password', '')
        }
        missing = [name for name, value in fields.items() if not value]
        if missing:
            flash(f"Missing required fields: {', '.join(missing)}")
            return render_template('auth/register.html', form=fields), 400
        if fields['password'] != request.form.get('confirm_password', fields['password']):
            flash('Passwords do not match.')
            return render_template('auth/register.html', form=fields), 400
        try:
            await g.auth.register(fields)
        except AuthError as e:
            flash(e.message or 'Registration failed.')
            return render_template('auth/register.html', form=fields), 400
        except EventHubError as e:
            current_app.logger.error(f"Registration failed: {e}")
            flash('The event service is unavailable. Please try again later.')
            return render_template('auth/register.html', form=fields), 503
        return redirect(url_for('events.dashboard'))

    return render_template('auth/register.html', form={})

@auth_bp.route('/logout', methods=['POST'])
async def logout():
    g.auth.logout()
    flash('You have been logged out.')
    return redirect(url_for('events.index'))

@auth_bp.route('/profile')
@login_required
async def profile():
    """Show the logged in user's account details and their events."""
    user = g.auth.current_user
    created = attending = []
    try:
        events = await g.auth.client.get_events()
        created = filter_events(events, FilterCriteria(relation='created'), user)
        attending = filter_events(events, FilterCriteria(relation='attending'), user)
    except EventHubError as e:
        current_app.logger.error(f"Error fetching events for profile: {e}")
        flash('Error fetching your events.')
    return render_template('auth/profile.html', user=user, created=created, attending=attending)
