"""
Cloud Functions entry points.

Deploy either function on its own:
    gcloud functions deploy seed_data --runtime python312 --trigger-http --entry-point seed_data
    gcloud functions deploy update_user --runtime python312 --trigger-http --entry-point update_user
or serve both routes (/seedData, /updateUser) from one deployment with --entry-point api.
"""

import logging

import functions_framework

from seed_functions.app import create_router, SEED_DATA_PATH, UPDATE_USER_PATH
from seed_functions.config import Settings
from seed_functions.seed_data import main as seed_data_main
from seed_functions.update_user import main as update_user_main
from seed_functions.utils.firestore_utils import init_firestore
from seed_functions.utils.http_utils import error_response
from seed_functions.utils.logging_utils import setup_logging, log_function_call

logger = logging.getLogger(__name__)

settings = Settings.from_environment()
setup_logging(settings.log_level, settings.cloud_logging)

# Initialize Firestore DB
try:
    db = init_firestore(settings)
    router = create_router(db, settings)
    logger.info("Firestore client initialized successfully.")
except Exception as e:
    logger.error(f"Failed to initialize Firestore client: {e}", exc_info=True)
    router = None


def _database_unavailable():
    return error_response('Internal server error: Database connection failed', 500)


@functions_framework.http
@log_function_call(seed_data_main.log)
def seed_data(request):
    """HTTP Cloud Function generating fake users, artists, albums and reviews."""
    if router is None:
        return _database_unavailable()
    return router.dispatch(request, path=SEED_DATA_PATH)


@functions_framework.http
@log_function_call(update_user_main.log)
def update_user(request):
    """HTTP Cloud Function applying a partial update to one user document."""
    if router is None:
        return _database_unavailable()
    return router.dispatch(request, path=UPDATE_USER_PATH)


@functions_framework.http
def api(request):
    """Single deployment serving every route on its request path."""
    if router is None:
        return _database_unavailable()
    return router.dispatch(request)
