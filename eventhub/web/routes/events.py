from datetime import datetime
from flask import Blueprint, abort, current_app, flash, g, make_response, redirect, render_template, request, url_for
from icalendar import Calendar, Event as ICalEvent

from ...errors import AuthError, EventHubError, NotFoundError, ValidationError
from ...models.event import CATEGORIES, EventDraft
from ...utils.event_filter import FilterCriteria, RELATIONS, filter_events
from ..context import login_required

# Create the blueprint
events_bp = Blueprint('events', __name__)

def criteria_from_request() -> FilterCriteria:
    """Build filter criteria from the query string, falling back to no filtering."""
    try:
        return FilterCriteria.from_args(
            search=request.args.get('q'),
            category=request.args.get('category'),
            relation=request.args.get('relation'),
            start=request.args.get('start'),
            end=request.args.get('end')
        )
    except ValueError as e:
        flash(f"Ignoring invalid filter: {e}")
        return FilterCriteria()

def draft_from_form() -> EventDraft:
    form = request.form
    return EventDraft(
        title=form.get('title', ''),
        description=form.get('description', ''),
        date=form.get('date', ''),
        time=form.get('time', ''),
        location=form.get('location', ''),
        category=form.get('category', 'other'),
        max_attendees=form.get('max_attendees', ''),
        image_url=form.get('image_url', '')
    )

async def attach_uploaded_image(draft: EventDraft) -> None:
    """Upload the form's image file, if any, and point the draft at it."""
    image = request.files.get('image')
    if image is None or not image.filename:
        return
    draft.image_url = await g.auth.client.upload_image(image.filename, image.read(), image.mimetype)

async def get_public_events():
    """Fetch public events from the API"""
    try:
        return await g.auth.client.get_public_events()
    except EventHubError as e:
        current_app.logger.error(f"Error fetching events from API: {e}")
        flash('Error fetching events')
        return []

async def get_event_or_404(event_id: str, public: bool = True):
    client = g.auth.client
    try:
        if public:
            return await client.get_public_event(event_id)
        return await client.get_event(event_id)
    except NotFoundError:
        abort(404)

@events_bp.route('/')
@events_bp.route('/events')
async def index():
    """Render the public events page."""
    events = await get_public_events()
    return render_template('events/list.html', events=events)

@events_bp.route('/dashboard')
@login_required
async def dashboard():
    """Render the searchable list of the user's visible events."""
    criteria = criteria_from_request()
    events = []
    try:
        events = await g.auth.client.get_events()
    except AuthError:
        g.auth.logout()
        flash('Your session has expired. Please log in again.')
        return redirect(url_for('auth.login', next=url_for('events.dashboard')))
    except EventHubError as e:
        current_app.logger.error(f"Error fetching events from API: {e}")
        flash('Error fetching events')

    filtered = filter_events(events, criteria, g.auth.current_user)
    return render_template(
        'events/dashboard.html',
        events=filtered,
        total=len(events),
        criteria=criteria,
        categories=CATEGORIES,
        relations=RELATIONS
    )

@events_bp.route('/events/<event_id>')
async def detail(event_id):
    """Render an event page with attendees and comments."""
    event = await get_event_or_404(event_id)
    user = g.auth.current_user
    return render_template(
        'events/detail.html',
        event=event,
        is_creator=event.is_created_by(user),
        is_attending=event.is_attended_by(user),
        can_attend=event.can_attend(user)
    )

@events_bp.route('/events/create', methods=['GET', 'POST'])
@login_required
async def create():
    """Render and handle the event creation form."""
    draft = EventDraft()
    if request.method == 'POST':
        draft = draft_from_form()
        try:
            draft.validate()
            await attach_uploaded_image(draft)
            event = await g.auth.client.create_event(draft)
        except ValidationError as e:
            flash(str(e))
            return render_template('events/form.html', draft=draft, categories=CATEGORIES, event_id=None), 400
        except EventHubError as e:
            flash(getattr(e, 'message', None) or 'Error creating event')
            return render_template('events/form.html', draft=draft, categories=CATEGORIES, event_id=None), 502
        return redirect(url_for('events.detail', event_id=event.id))

    return render_template('events/form.html', draft=draft, categories=CATEGORIES, event_id=None)

@events_bp.route('/events/<event_id>/edit', methods=['GET', 'POST'])
@login_required
async def edit(event_id):
    """Render and handle the edit form; only the creator may edit."""
    event = await get_event_or_404(event_id, public=False)
    if not event.is_created_by(g.auth.current_user):
        flash('Only the creator can edit this event.')
        return redirect(url_for('events.index'))

    draft = EventDraft.from_event(event)
    if request.method == 'POST':
        draft = draft_from_form()
        try:
            draft.validate()
            await attach_uploaded_image(draft)
            await g.auth.client.update_event(event_id, draft)
        except ValidationError as e:
            flash(str(e))
            return render_template('events/form.html', draft=draft, categories=CATEGORIES, event_id=event_id), 400
        except EventHubError as e:
            flash(getattr(e, 'message', None) or 'Error updating event')
            return render_template('events/form.html', draft=draft, categories=CATEGORIES, event_id=event_id), 502
        return redirect(url_for('events.detail', event_id=event_id))

    return render_template('events/form.html', draft=draft, categories=CATEGORIES, event_id=event_id)

@events_bp.route('/events/<event_id>/delete', methods=['POST'])
@login_required
async def delete(event_id):
    try:
        await g.auth.client.delete_event(event_id)
    except EventHubError as e:
        current_app.logger.error(f"Error deleting event {event_id}: {e}")
        flash('Error deleting event')
        return redirect(url_for('events.detail', event_id=event_id))
    flash('Event deleted.')
    return redirect(url_for('events.index'))

@events_bp.route('/events/<event_id>/attend', methods=['POST'])
@login_required
async def attend(event_id):
    try:
        await g.auth.client.attend_event(event_id)
    except EventHubError as e:
        flash(getattr(e, 'message', None) or 'Error attending event')
    return redirect(url_for('events.detail', event_id=event_id))

@events_bp.route('/events/<event_id>/comments', methods=['POST'])
@login_required
async def comment(event_id):
    try:
        await g.auth.client.add_comment(event_id, request.form.get('content', ''))
    except ValidationError:
        flash('Comment cannot be empty.')
    except EventHubError as e:
        current_app.logger.error(f"Error posting comment on {event_id}: {e}")
        flash('Error posting comment')
    return redirect(url_for('events.detail', event_id=event_id))

@events_bp.route('/calendar.ics')
async def ics_feed():
    """Generate an iCalendar feed of the public events, narrowed by the query string."""
    events = filter_events(await get_public_events(), criteria_from_request(), g.auth.current_user)

    # Create calendar
    cal = Calendar()
    cal.add('prodid', '-//EventHub//eventhub//')
    cal.add('version', '2.0')
    cal.add('x-wr-calname', 'EventHub Events')

    # Add events to calendar
    for event in events:
        if event.date is None:
            continue
        cal_event = ICalEvent()
        cal_event.add('uid', f"{event.id}@eventhub")
        cal_event.add('summary', event.title)

        start = event.date
        if event.time:
            try:
                start = datetime.combine(event.date, datetime.strptime(event.time.strip(), '%H:%M').time())
            except ValueError:
                pass
        cal_event.add('dtstart', start)

        if event.description:
            cal_event.add('description', event.description)

        if event.location:
            cal_event.add('location', event.location)

        cal_event.add('url', url_for('events.detail', event_id=event.id, _external=True))
        if event.category:
            cal_event.add('categories', [event.category])

        cal.add_component(cal_event)

    # Generate response
    response = make_response(cal.to_ical())
    response.headers['Content-Type'] = 'text/calendar; charset=utf-8'
    response.headers['Content-Disposition'] = 'attachment; filename=calendar.ics'

    return response
