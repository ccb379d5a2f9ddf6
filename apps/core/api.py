"""
Base view for the JSON API.
"""

import logging

from django.db import DatabaseError, IntegrityError
from django.http import JsonResponse
from django.views import View

from .exceptions import Conflict, ServiceError, TransientError
from .utils import parse_json_body

logger = logging.getLogger(__name__)


class JsonApiView(View):
    """
    Class-based view that maps the service error taxonomy onto JSON responses.

    Handlers return plain dicts/lists (wrapped in JsonResponse) or a ready
    HttpResponse.
    """
    status_code = 200

    def dispatch(self, request, *args, **kwargs):
        try:
            result = super().dispatch(request, *args, **kwargs)
        except ServiceError as exc:
            return self.error_response(exc)
        except IntegrityError as exc:
            logger.warning(f"{self.__class__.__name__}: unhandled integrity error: {exc}")
            return self.error_response(Conflict())
        except DatabaseError:
            logger.exception(f"{self.__class__.__name__}: database error")
            return self.error_response(TransientError())

        if isinstance(result, (dict, list)):
            return JsonResponse(result, status=self.status_code, safe=False)
        return result

    def error_response(self, exc):
        return JsonResponse(exc.to_dict(), status=exc.status_code)

    def get_json(self):
        return parse_json_body(self.request)


def get_or_raise(queryset, exc_class, **lookup):
    """Fetch one object or raise the given NotFound subclass."""
    obj = queryset.filter(**lookup).first()
    if obj is None:
        raise exc_class()
    return obj
