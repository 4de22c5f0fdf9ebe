"""
Fake data generators for the seed_data function.

Each generator returns one document as a plain dict and performs no I/O.
Artist and album ids are drawn independently from fixed ranges, so two
entities of the same kind can collide within one seed run.
"""

import re
from datetime import datetime, timezone

from faker import Faker
from faker.providers import BaseProvider
from firebase_admin import firestore

ARTIST_ID_RANGE = (1000, 9999)
ALBUM_ID_RANGE = (10000, 99999)
SCORE_RANGE = (0, 100)
LIKES_RANGE = (0, 50)
ALBUM_YEARS_BACK = 30

USERNAME_INVALID_CHARS = re.compile(r'[^a-zA-Z0-9_]')


class MusicProvider(BaseProvider):
    """Faker provider for music catalogue data and placeholder images."""

    genres = (
        'Rock', 'Pop', 'Hip Hop', 'Jazz', 'Electronic', 'Classical', 'Country',
        'Folk', 'Reggae', 'Blues', 'Metal', 'Soul', 'Funk', 'Latin', 'Stage And Screen',
        'Non Music', 'World',
    )

    band_formats = (
        'The {noun}s',
        '{adjective} {noun}',
        '{noun} {noun}',
        'The {adjective} {noun}s',
    )

    song_formats = (
        '{adjective} {noun}',
        '{verb} Me {adverb}',
        'The {noun} of {noun}',
        '{noun}',
        'Love {noun}',
    )

    adjectives = (
        'Electric', 'Silent', 'Golden', 'Broken', 'Midnight', 'Velvet', 'Wild',
        'Crimson', 'Lonely', 'Neon', 'Hollow', 'Restless', 'Blue', 'Burning',
    )

    nouns = (
        'Heart', 'River', 'Echo', 'Dream', 'Shadow', 'Fire', 'Stone', 'Highway',
        'Mirror', 'Ocean', 'Garden', 'Rebel', 'Ghost', 'Signal', 'Horizon',
    )

    verbs = ('Hold', 'Love', 'Leave', 'Take', 'Call', 'Save', 'Show', 'Tell')

    adverbs = ('Tonight', 'Tender', 'Slowly', 'Forever', 'Again', 'Now')

    def music_genre(self):
        return self.random_element(self.genres)

    def _fill(self, pattern):
        # Each placeholder gets its own draw, so '{noun} {noun}' yields two nouns
        parts = re.split(r'(\{\w+\})', pattern)
        words = {
            '{adjective}': self.adjectives,
            '{noun}': self.nouns,
            '{verb}': self.verbs,
            '{adverb}': self.adverbs,
        }
        return ''.join(self.random_element(words[p]) if p in words else p for p in parts)

    def music_artist(self):
        if self.generator.random.random() < 0.5:
            return self.generator.name()
        return self._fill(self.random_element(self.band_formats))

    def song_name(self):
        return self._fill(self.random_element(self.song_formats))

    def avatar_url(self):
        return f"https://i.pravatar.cc/300?u={self.generator.uuid4()}"

    def picsum_url(self, width=640, height=480):
        seed = self.lexify('????????')
        return f"https://picsum.photos/seed/{seed}/{width}/{height}"


fake = Faker()
fake.add_provider(MusicProvider)


def make_fake_user():
    user_id = fake.uuid4()
    username = USERNAME_INVALID_CHARS.sub('', fake.user_name()).lower()
    name = fake.name()
    profile_image_url = fake.avatar_url()
    return {
        'id': user_id,
        'username': username,
        'email': fake.email(),
        'name': name,
        'bio': fake.sentence(),
        'profileImageUrl': profile_image_url,
        'avatarUrl': profile_image_url,
        'usernameLowercase': username.lower(),
        'nameLowercase': name.lower(),
        'followers': 0,
        'followersCount': 0,
        'following': 0,
        'followingCount': 0,
        'createdAt': firestore.SERVER_TIMESTAMP,
        'updatedAt': firestore.SERVER_TIMESTAMP
    }


def make_fake_artist():
    return {
        'id': fake.random_int(*ARTIST_ID_RANGE),
        'name': fake.music_artist(),
        'profileImageUrl': fake.picsum_url(),
        'genre': fake.music_genre(),
        'createdAt': firestore.SERVER_TIMESTAMP
    }


def make_fake_album(artist):
    """Build an album carrying a snapshot of its artist; the snapshot is never refreshed."""
    released = fake.date_between(start_date=f'-{ALBUM_YEARS_BACK}y', end_date='today')
    return {
        'id': fake.random_int(*ALBUM_ID_RANGE),
        'title': fake.song_name(),
        'year': str(released.year),
        'coverUrl': fake.picsum_url(),
        'artist': {
            'id': artist['id'],
            'name': artist['name'],
            'profileImageUrl': artist['profileImageUrl'],
            'genre': artist['genre']
        },
        'createdAt': firestore.SERVER_TIMESTAMP
    }


def make_fake_review(user_id, album_id):
    # Reviews carry client-side ISO timestamps, unlike the other collections
    now = datetime.now(timezone.utc).isoformat()
    return {
        'content': fake.paragraph(),
        'score': fake.random_int(*SCORE_RANGE),
        'isLowScore': False,
        'albumId': album_id,
        'userId': user_id,
        'firebaseUserId': user_id,
        'likesCount': fake.random_int(*LIKES_RANGE),
        'createdAt': now,
        'updatedAt': now
    }


def pick_album(albums):
    """Pick one album uniformly at random from the pool."""
    return fake.random_element(albums)
