import math
from collections import Counter

from seed_functions.seed_data.generators import (
    make_fake_user,
    make_fake_artist,
    make_fake_album,
    make_fake_review,
    pick_album,
)
from seed_functions.utils.firestore_utils import commit_in_batches
from seed_functions.utils.http_utils import get_param
from seed_functions.utils.logging_utils import create_logger

# Create structured logger
log = create_logger('seed_data')

# parameter name -> (default, cap)
SEED_LIMITS = {
    'users': (20, 500),
    'artists': (8, 200),
    'albumsPerArtist': (3, 20),
    'reviewsPerUser': (2, 20),
}


def parse_count(value, default, cap):
    """
    Parse a requested count, falling back to the default when missing or
    non-numeric and clamping the result to [1, cap].
    """
    if value is None or value == '' or isinstance(value, bool):
        return default
    if isinstance(value, int):
        return max(1, min(value, cap))
    try:
        number = float(value)
    except (ValueError, TypeError, OverflowError):
        return default
    if math.isnan(number):
        return default
    if math.isinf(number):
        return cap if number > 0 else 1
    return max(1, min(int(number), cap))


def parse_seed_counts(request):
    """Read the seed sizes from the query string, then the JSON body."""
    return {
        name: parse_count(get_param(request, name), default, cap)
        for name, (default, cap) in SEED_LIMITS.items()
    }


def generate_seed_graph(users_count, artists_count, albums_per_artist, reviews_per_user):
    """
    Generate users, artists with their albums, and reviews linking every user
    to albums picked at random from the whole pool.

    Returns:
        dict with 'users', 'artists', 'albums' and 'reviews' lists
    """
    users = [make_fake_user() for _ in range(users_count)]

    artists = []
    albums = []
    for _ in range(artists_count):
        artist = make_fake_artist()
        artists.append(artist)
        for _ in range(albums_per_artist):
            albums.append(make_fake_album(artist))

    reviews = []
    if albums:
        for user in users:
            for _ in range(reviews_per_user):
                album = pick_album(albums)
                reviews.append(make_fake_review(user['id'], album['id']))

    return {'users': users, 'artists': artists, 'albums': albums, 'reviews': reviews}


def find_id_collisions(entities):
    """Return the ids shared by more than one entity."""
    counts = Counter(entity['id'] for entity in entities)
    return sorted(entity_id for entity_id, n in counts.items() if n > 1)


def build_write_ops(db, graph):
    """Turn the generated graph into (document_reference, data) pairs in write order."""
    ops = []

    for user in graph['users']:
        ops.append((db.collection('users').document(user['id']), user))

    for artist in graph['artists']:
        ops.append((db.collection('artists').document(str(artist['id'])), artist))

    for album in graph['albums']:
        ops.append((db.collection('albums').document(str(album['id'])), album))

    # Reviews have no natural key
    for review in graph['reviews']:
        ops.append((db.collection('reviews').document(), review))

    return ops


def seed(db, counts, batch_size):
    """
    Generate a seed graph of the requested size and write it to Firestore.

    Returns:
        tuple: (generated counts, number of committed batches)
    """
    graph = generate_seed_graph(
        counts['users'],
        counts['artists'],
        counts['albumsPerArtist'],
        counts['reviewsPerUser'],
    )

    for kind in ('artists', 'albums'):
        collisions = find_id_collisions(graph[kind])
        if collisions:
            # Colliding documents are merged into each other, later writes win
            log.warning(f"{len(collisions)} {kind} ids generated more than once in this run", {
                'ids': collisions
            })

    ops = build_write_ops(db, graph)
    log.info(f"Writing {len(ops)} documents in batches of {batch_size}")
    batches = commit_in_batches(db, ops, batch_size=batch_size)

    generated = {kind: len(entities) for kind, entities in graph.items()}
    return generated, batches


def create_seed_handler(db, settings):
    """Build the /seedData handler bound to a Firestore client and settings."""
    def seed_data(request):
        counts = parse_seed_counts(request)
        log.info("Seeding Firestore", counts)

        generated, batches = seed(db, counts, settings.batch_size)

        log.info(f"✅ Seeding completed in {batches} batches", generated)
        return {
            'ok': True,
            'message': 'Seeding completed',
            'counts': generated
        }, 200

    return seed_data
