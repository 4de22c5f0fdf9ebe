from seed_functions.seed_data.main import create_seed_handler
from seed_functions.update_user.main import create_update_user_handler, require_user_patch
from seed_functions.utils.http_utils import Router, require_seed_key

SEED_DATA_PATH = '/seedData'
UPDATE_USER_PATH = '/updateUser'


def create_router(db, settings):
    """Wire both endpoints to a router; authorization runs before validation."""
    router = Router(allowed_methods=('GET', 'POST'))
    authorized = require_seed_key(settings)

    router.add_route(
        SEED_DATA_PATH,
        create_seed_handler(db, settings),
        guards=[authorized],
    )
    router.add_route(
        UPDATE_USER_PATH,
        create_update_user_handler(db),
        guards=[authorized, require_user_patch],
    )
    return router
