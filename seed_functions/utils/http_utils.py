import json
import logging
import traceback

from seed_functions.utils.firestore_utils import DateTimeEncoder

logger = logging.getLogger(__name__)

CORS_HEADERS = {'Access-Control-Allow-Origin': '*'}

SEED_KEY_HEADER = 'x-seed-key'


class HttpError(Exception):
    """An error that maps to an HTTP status and a JSON error body."""
    status = 500

    def __init__(self, message, status=None):
        super().__init__(message)
        self.message = message
        if status is not None:
            self.status = status


class BadRequest(HttpError):
    status = 400


class Unauthorized(HttpError):
    status = 401


class NotFound(HttpError):
    status = 404


class MethodNotAllowed(HttpError):
    status = 405


def json_response(payload, status=200, headers=None):
    """Build a functions-framework response tuple with a JSON body."""
    response_headers = dict(CORS_HEADERS)
    response_headers['Content-Type'] = 'application/json'
    if headers:
        response_headers.update(headers)
    return (json.dumps(payload, cls=DateTimeEncoder), status, response_headers)


def error_response(message, status):
    return json_response({'ok': False, 'error': message}, status)


def get_body(request):
    """Return the JSON body as a dict, or {} when absent or not an object."""
    body = request.get_json(silent=True)
    return body if isinstance(body, dict) else {}


def first_present(*values):
    """Return the first value that is neither None nor an empty string."""
    for value in values:
        if value is not None and value != '':
            return value
    return None


def get_param(request, name, body_first=False):
    """Look a parameter up in the query string and the JSON body."""
    query_value = request.args.get(name)
    body_value = get_body(request).get(name)
    if body_first:
        return first_present(body_value, query_value)
    return first_present(query_value, body_value)


def get_seed_key(request):
    """Presented secret: `key` query parameter, `x-seed-key` header, then `key` body field."""
    return first_present(
        request.args.get('key'),
        request.headers.get(SEED_KEY_HEADER),
        get_body(request).get('key'),
    ) or ''


def require_seed_key(settings):
    """Guard rejecting requests whose presented key differs from the configured one."""
    def guard(request):
        key = get_seed_key(request)
        if not key or key != settings.seed_key:
            raise Unauthorized('Unauthorized (invalid key)')
    guard.__name__ = 'require_seed_key'
    return guard


class Router:
    """
    Maps (path, method) pairs to handlers.

    Handlers take the request and return (payload, status). Guards take the
    request and raise HttpError to stop it before the handler runs.
    """

    def __init__(self, allowed_methods=('GET', 'POST')):
        self.routes = {}
        self.allowed_methods = allowed_methods

    def add_route(self, path, handler, methods=None, guards=()):
        methods = tuple(m.upper() for m in (methods or self.allowed_methods))
        self.routes[path] = {
            'handler': handler,
            'methods': methods,
            'guards': tuple(guards),
        }
        return handler

    def route(self, path, methods=None, guards=()):
        """Decorator form of add_route."""
        def decorator(handler):
            return self.add_route(path, handler, methods=methods, guards=guards)
        return decorator

    def preflight(self, path):
        entry = self.routes.get(path)
        methods = entry['methods'] if entry else self.allowed_methods
        headers = {
            'Access-Control-Allow-Origin': '*',
            'Access-Control-Allow-Methods': ', '.join(methods),
            'Access-Control-Allow-Headers': f'Content-Type, {SEED_KEY_HEADER}',
            'Access-Control-Max-Age': '3600'
        }
        return ('', 204, headers)

    def dispatch(self, request, path=None):
        path = path or request.path

        # Enable CORS
        if request.method == 'OPTIONS':
            return self.preflight(path)

        try:
            entry = self.routes.get(path)
            if entry is None:
                raise NotFound('Not found')
            if request.method not in entry['methods']:
                raise MethodNotAllowed(f"Method {request.method} not allowed")

            for guard in entry['guards']:
                guard(request)

            payload, status = entry['handler'](request)
            return json_response(payload, status)

        except HttpError as e:
            logger.warning(f"{request.method} {path} rejected with {e.status}: {e.message}")
            return error_response(e.message, e.status)
        except Exception as e:
            logger.error(f"Error handling {request.method} {path}: {str(e)}\n{traceback.format_exc()}")
            return error_response(str(e), 500)
