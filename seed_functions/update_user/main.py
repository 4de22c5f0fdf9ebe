import json

from firebase_admin import firestore

from seed_functions.utils.firestore_utils import serialize_firestore_data
from seed_functions.utils.http_utils import BadRequest, get_param
from seed_functions.utils.logging_utils import create_logger

# Create structured logger
log = create_logger('update_user')

# source field -> derived lowercase field
LOWERCASE_FIELDS = {
    'username': 'usernameLowercase',
    'name': 'nameLowercase',
}


def parse_updates(value):
    """
    Accept a JSON object, or a JSON-encoded object when the updates come from
    the query string. Anything else yields None.
    """
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except ValueError:
            return None
    return value if isinstance(value, dict) else None


def read_user_patch(request):
    """
    Guard and parser for /updateUser: returns (user_id, updates) or raises
    BadRequest before anything is written.
    """
    user_id = get_param(request, 'id', body_first=True)
    updates = parse_updates(get_param(request, 'updates', body_first=True))

    if not user_id or not isinstance(user_id, str) or updates is None:
        raise BadRequest('Bad request: missing id or updates')

    return user_id, updates


def require_user_patch(request):
    read_user_patch(request)


def build_user_update(updates):
    """
    Build the Firestore update payload: the client fields, recomputed
    lowercase search fields for the ones being changed, and updatedAt.
    """
    payload = {k: v for k, v in updates.items() if k not in LOWERCASE_FIELDS.values()}

    for source, derived in LOWERCASE_FIELDS.items():
        if source in updates and updates[source] is not None:
            payload[derived] = str(updates[source]).lower()

    payload['updatedAt'] = firestore.SERVER_TIMESTAMP
    return payload


def patch_user(db, user_id, updates):
    """
    Apply a partial update to users/{user_id} and return the stored document.
    Raises google.api_core.exceptions.NotFound when the user does not exist.
    """
    user_ref = db.collection('users').document(user_id)
    payload = build_user_update(updates)

    log.info(f"Updating user {user_id}", {'fields': sorted(payload.keys())})
    user_ref.update(payload)

    updated = user_ref.get()
    return updated.to_dict()


def create_update_user_handler(db):
    """Build the /updateUser handler bound to a Firestore client."""
    def update_user(request):
        user_id, updates = read_user_patch(request)
        user_data = patch_user(db, user_id, updates)
        log.info(f"✅ User {user_id} updated")
        return {'ok': True, 'user': serialize_firestore_data(user_data)}, 200

    return update_user
