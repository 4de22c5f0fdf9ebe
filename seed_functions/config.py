import os
import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DEFAULT_SEED_KEY = 'dev-seed-key'
DEFAULT_DATABASE = '(default)'
MAX_BATCH_SIZE = 500


def get_secret(secret_id, project_id, version_id='latest'):
    """Fetch a secret value from Google Secret Manager."""
    try:
        from google.cloud import secretmanager
        client = secretmanager.SecretManagerServiceClient()
        name = f"projects/{project_id}/secrets/{secret_id}/versions/{version_id}"
        response = client.access_secret_version(request={"name": name})
        # Strip whitespace and newlines left over from `gcloud secrets create --data-file`
        return response.payload.data.decode("UTF-8").strip()
    except Exception as e:
        logger.error(f"Error accessing secret '{secret_id}': {str(e)}")
        raise


def _parse_bool(value):
    return str(value).strip().lower() in ('1', 'true', 'yes', 'on')


@dataclass(frozen=True)
class Settings:
    """Configuration resolved once at startup and handed to the request handlers."""

    seed_key: str = DEFAULT_SEED_KEY
    project_id: str = None
    database: str = DEFAULT_DATABASE
    batch_size: int = MAX_BATCH_SIZE
    log_level: str = 'INFO'
    cloud_logging: bool = False

    @classmethod
    def from_environment(cls, environ=None, secret_fetcher=get_secret):
        """
        Build settings from the process environment.

        The seed key comes from the Secret Manager secret named by
        SEED_KEY_SECRET_ID, then the SEED_KEY variable, then the development
        default.
        """
        environ = os.environ if environ is None else environ

        project_id = environ.get('GCP_PROJECT') or environ.get('GOOGLE_CLOUD_PROJECT') or None

        seed_key = None
        secret_id = environ.get('SEED_KEY_SECRET_ID')
        if secret_id:
            if not project_id:
                raise ValueError("SEED_KEY_SECRET_ID is set but no GCP_PROJECT/GOOGLE_CLOUD_PROJECT is configured")
            version_id = environ.get('SEED_KEY_SECRET_VERSION', 'latest')
            seed_key = secret_fetcher(secret_id, project_id, version_id)
            logger.info(f"Seed key loaded from Secret Manager secret '{secret_id}'")

        if not seed_key:
            seed_key = environ.get('SEED_KEY')

        if not seed_key:
            logger.warning("No seed key configured, falling back to the development default")
            seed_key = DEFAULT_SEED_KEY

        try:
            batch_size = int(environ.get('SEED_BATCH_SIZE', MAX_BATCH_SIZE))
        except ValueError:
            logger.warning(f"Invalid SEED_BATCH_SIZE {environ.get('SEED_BATCH_SIZE')!r}, using {MAX_BATCH_SIZE}")
            batch_size = MAX_BATCH_SIZE
        batch_size = max(1, min(batch_size, MAX_BATCH_SIZE))

        if 'ENABLE_CLOUD_LOGGING' in environ:
            cloud_logging = _parse_bool(environ['ENABLE_CLOUD_LOGGING'])
        else:
            # K_SERVICE is set by the Cloud Functions (gen2) / Cloud Run runtime
            cloud_logging = bool(environ.get('K_SERVICE'))

        return cls(
            seed_key=seed_key,
            project_id=project_id,
            database=environ.get('FIRESTORE_DATABASE') or DEFAULT_DATABASE,
            batch_size=batch_size,
            log_level=environ.get('LOG_LEVEL', 'INFO'),
            cloud_logging=cloud_logging,
        )
