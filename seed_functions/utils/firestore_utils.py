import json
import logging
from datetime import datetime

import firebase_admin
from firebase_admin import firestore

from seed_functions.config import MAX_BATCH_SIZE

logger = logging.getLogger(__name__)


def init_firestore(settings):
    """
    Initialize Firebase Admin (once per process) and return a Firestore client
    for the configured project and database.
    """
    try:
        firebase_admin.get_app()
    except ValueError:
        firebase_admin.initialize_app()

    return firestore.Client(project=settings.project_id, database=settings.database)


def commit_in_batches(db, ops, batch_size=MAX_BATCH_SIZE):
    """
    Write (ref, data) pairs with merge semantics in sequential batches.

    Args:
        db: Firestore client
        ops: iterable of (document_reference, data) tuples, written in order
        batch_size: maximum number of writes per batch (Firestore allows 500)

    Returns:
        int: number of batches committed
    """
    if not 1 <= batch_size <= MAX_BATCH_SIZE:
        raise ValueError(f"batch_size must be between 1 and {MAX_BATCH_SIZE}, got {batch_size}")

    batch = db.batch()
    count = 0
    committed = 0
    written = 0

    for ref, data in ops:
        batch.set(ref, data, merge=True)
        count += 1
        if count >= batch_size:
            batch.commit()
            committed += 1
            written += count
            logger.info(f"Committed batch {committed} ({count} writes, {written} total)")
            batch = db.batch()
            count = 0

    # Final partially-filled batch
    if count > 0:
        batch.commit()
        committed += 1
        written += count
        logger.info(f"Committed batch {committed} ({count} writes, {written} total)")

    return committed


# Custom JSON encoder to handle datetime objects
class DateTimeEncoder(json.JSONEncoder):
    def default(self, obj):
        if isinstance(obj, datetime):
            return obj.isoformat()
        return super(DateTimeEncoder, self).default(obj)


def serialize_firestore_data(data):
    """Helper function to serialize Firestore data for JSON, converting datetimes."""
    if isinstance(data, dict):
        return {k: serialize_firestore_data(v) for k, v in data.items()}
    elif isinstance(data, (list, tuple)):
        return [serialize_firestore_data(item) for item in data]
    elif isinstance(data, datetime):
        # DatetimeWithNanoseconds is a datetime subclass
        return data.isoformat()
    elif data is firestore.SERVER_TIMESTAMP:
        return None
    elif isinstance(data, firestore.GeoPoint):
        return {'latitude': data.latitude, 'longitude': data.longitude}
    elif isinstance(data, firestore.DocumentReference):
        return data.path
    else:
        return data
