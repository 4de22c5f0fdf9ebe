import json
import math

import pytest

from seed_functions.seed_data import main as seed_main
from seed_functions.seed_data.main import (
    find_id_collisions,
    generate_seed_graph,
    parse_count,
)
from tests.conftest import SEED_KEY
from tests.mock_firestore import MockFirestore, SERVER_TIME


def _seed(router, make_request, **kwargs):
    request = make_request('/seedData', **kwargs)
    body, status, headers = router.dispatch(request)
    return json.loads(body), status, headers


@pytest.mark.parametrize('value, expected', [
    (None, 20),
    ('', 20),
    ('abc', 20),
    ('5', 5),
    (5, 5),
    ('7.9', 7),
    ('0', 1),
    ('-3', 1),
    ('10000', 500),
    (True, 20),
    ([1], 20),
    ('1e400', 500),
    ('Infinity', 500),
    ('-Infinity', 1),
    ('nan', 20),
    (10 ** 400, 500),
    (float('inf'), 500),
])
def test_parse_count(value, expected):
    assert parse_count(value, 20, 500) == expected


def test_seed_with_defaults(router, make_request, db):
    body, status, headers = _seed(router, make_request, query={'key': SEED_KEY})

    assert status == 200
    assert headers['Access-Control-Allow-Origin'] == '*'
    assert body == {
        'ok': True,
        'message': 'Seeding completed',
        'counts': {'users': 20, 'artists': 8, 'albums': 24, 'reviews': 40},
    }
    assert len(db.docs('users')) == 20
    assert len(db.docs('reviews')) == 40


def test_seed_counts_and_write_totals(router, make_request, db):
    body, status, _ = _seed(router, make_request, method='POST', json={
        'key': SEED_KEY, 'users': 7, 'artists': 3, 'albumsPerArtist': 4, 'reviewsPerUser': 5,
    })

    assert status == 200
    assert body['counts'] == {'users': 7, 'artists': 3, 'albums': 12, 'reviews': 35}
    assert len(db.writes) == 7 + 3 + 3 * 4 + 7 * 5
    assert len(db.commits) == 1


def test_query_parameters_win_over_body(router, make_request):
    body, _, _ = _seed(
        router, make_request, method='POST',
        query={'key': SEED_KEY, 'users': '2'},
        json={'users': 9, 'artists': 1, 'albumsPerArtist': 1, 'reviewsPerUser': 1},
    )
    assert body['counts']['users'] == 2
    assert body['counts']['artists'] == 1


def test_counts_are_clamped_to_caps(router, make_request, db):
    body, status, _ = _seed(router, make_request, query={
        'key': SEED_KEY, 'users': '9999', 'artists': '1', 'albumsPerArtist': '999', 'reviewsPerUser': '0',
    })

    assert status == 200
    assert body['counts'] == {'users': 500, 'artists': 1, 'albums': 20, 'reviews': 500}
    total_ops = 500 + 1 + 20 + 500
    assert len(db.writes) == total_ops
    assert len(db.commits) == math.ceil(total_ops / 500)
    assert db.commits == [500, 500, 21]


def test_generated_documents_are_consistent(router, make_request, db):
    _seed(router, make_request, query={'key': SEED_KEY, 'users': '15', 'artists': '4'})

    users = db.docs('users')
    for doc_id, user in users.items():
        assert user['id'] == doc_id
        assert user['usernameLowercase'] == user['username'].lower()
        assert user['nameLowercase'] == user['name'].lower()
        assert user['createdAt'] == SERVER_TIME

    albums = db.docs('albums')
    for doc_id, album in albums.items():
        assert str(album['id']) == doc_id

    for review in db.docs('reviews').values():
        assert review['userId'] in users
        assert str(review['albumId']) in albums


def test_reviews_reference_the_generated_pool():
    graph = generate_seed_graph(10, 3, 2, 4)

    user_ids = {u['id'] for u in graph['users']}
    album_ids = {a['id'] for a in graph['albums']}
    assert len(graph['albums']) == 6
    assert len(graph['reviews']) == 40
    for review in graph['reviews']:
        assert review['userId'] in user_ids
        assert review['albumId'] in album_ids


def test_find_id_collisions():
    assert find_id_collisions([{'id': 1}, {'id': 2}, {'id': 1}, {'id': 3}, {'id': 3}]) == [1, 3]
    assert find_id_collisions([{'id': 1}, {'id': 2}]) == []


def test_colliding_artist_ids_overwrite(monkeypatch, router, make_request, db):
    artists = iter([
        {'id': 4242, 'name': 'First', 'profileImageUrl': 'a', 'genre': 'Rock'},
        {'id': 4242, 'name': 'Second', 'profileImageUrl': 'b', 'genre': 'Jazz'},
    ])
    monkeypatch.setattr(seed_main, 'make_fake_artist', lambda: next(artists))

    body, status, _ = _seed(router, make_request, query={
        'key': SEED_KEY, 'users': '1', 'artists': '2', 'albumsPerArtist': '1', 'reviewsPerUser': '1',
    })

    assert status == 200
    assert body['counts']['artists'] == 2
    assert db.docs('artists') == {'4242': {'id': 4242, 'name': 'Second', 'profileImageUrl': 'b', 'genre': 'Jazz'}}


def test_key_from_header_and_body(router, make_request):
    _, status, _ = _seed(router, make_request, query={'users': '1'}, headers={'x-seed-key': SEED_KEY})
    assert status == 200

    _, status, _ = _seed(router, make_request, method='POST', json={'key': SEED_KEY, 'users': 1})
    assert status == 200


@pytest.mark.parametrize('kwargs', [
    {},
    {'query': {'key': 'wrong'}},
    {'query': {'key': ''}},
    {'headers': {'x-seed-key': 'wrong'}},
    {'method': 'POST', 'json': {'key': 'wrong'}},
    # the query parameter takes precedence over a valid header
    {'query': {'key': 'wrong'}, 'headers': {'x-seed-key': SEED_KEY}},
])
def test_unauthorized_requests_write_nothing(router, make_request, db, kwargs):
    body, status, _ = _seed(router, make_request, **kwargs)

    assert status == 401
    assert body == {'ok': False, 'error': 'Unauthorized (invalid key)'}
    assert db.writes == []
    assert db.commits == []


def test_storage_failure_returns_500(settings, make_request):
    from seed_functions.app import create_router

    db = MockFirestore(fail_on_commit=1)
    router = create_router(db, settings)

    body, status, _ = _seed(router, make_request, query={'key': SEED_KEY})

    assert status == 500
    assert body == {'ok': False, 'error': 'commit failed'}


def test_partial_failure_keeps_committed_batches(make_request):
    from seed_functions.app import create_router
    from seed_functions.config import Settings

    db = MockFirestore(fail_on_commit=2)
    router = create_router(db, Settings(seed_key=SEED_KEY, batch_size=10))

    _, status, _ = _seed(router, make_request, query={'key': SEED_KEY, 'users': '20'})

    assert status == 500
    assert db.commits == [10]
    assert len(db.docs('users')) == 10


def test_overflowing_count_is_clamped_to_cap(router, make_request):
    body, status, _ = _seed(router, make_request, query={
        'key': SEED_KEY, 'users': '1e400', 'artists': '1', 'albumsPerArtist': '1', 'reviewsPerUser': '1',
    })

    assert status == 200
    assert body['counts']['users'] == 500
