"""Cloud Functions that seed Firestore with fake music-review data."""

__version__ = '1.0.0'
