"""Framework-level routes, logged by URL path rather than view name."""

from django.http import HttpRequest, HttpResponse


def robots(request: HttpRequest) -> HttpResponse:
    return HttpResponse("User-agent: *\nDisallow:\n", content_type='text/plain')
