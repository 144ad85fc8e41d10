"""Sample views covering every kind of outcome the request log reports."""

import io
import logging
import threading

from django.http import FileResponse, HttpRequest, HttpResponse, HttpResponseRedirect, JsonResponse, StreamingHttpResponse
from django.template.response import TemplateResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.generic import TemplateView

from request_log import set_custom_data
from request_log.utils.request_context import get_request_id

logger = logging.getLogger(__name__)


def index(request: HttpRequest) -> HttpResponse:
    return HttpResponse("ok")


def order_detail(request: HttpRequest, order_id: int) -> TemplateResponse:
    return TemplateResponse(request, 'orders/detail.html', {'order_id': order_id})


class OrderListView(TemplateView):
    template_name = 'orders/list.html'

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context['orders'] = [1, 2, 3]
        return context


@csrf_exempt
def checkout(request: HttpRequest) -> HttpResponseRedirect:
    order_id = 7
    set_custom_data(request, f"order={order_id}")
    logger.info(f"Checkout complete for order {order_id}")
    return HttpResponseRedirect(f'/orders/{order_id}/')


@csrf_exempt
def login(request: HttpRequest) -> JsonResponse:
    request.session['user'] = request.POST.get('username', 'anonymous')
    request.session.save()
    return JsonResponse({'ok': True})


def download(request: HttpRequest) -> FileResponse:
    return FileResponse(io.BytesIO(b"id,total\n7,42\n"), filename='report.csv', content_type='text/csv')


def fail(request: HttpRequest) -> HttpResponse:
    raise ValueError("payment gateway timeout")


def broken(request: HttpRequest) -> TemplateResponse:
    return TemplateResponse(request, 'broken.html', {})


def unavailable(request: HttpRequest) -> HttpResponse:
    return HttpResponse("maintenance", status=503)


def stream(request: HttpRequest) -> StreamingHttpResponse:
    def rows():
        for i in range(3):
            yield f"row {i}\n"
    return StreamingHttpResponse(rows(), content_type='text/plain')


def worker(request: HttpRequest) -> HttpResponse:
    """Echo the current thread's name, as decorated while this view runs."""
    return HttpResponse(threading.current_thread().name, content_type='text/plain')


def correlation(request: HttpRequest) -> HttpResponse:
    """Echo the request id the log filter stamps on records from this view."""
    return HttpResponse(get_request_id() or '-', content_type='text/plain')
