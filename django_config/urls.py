"""
URL configuration for the request log sample site.

Each route returns a different kind of response so the request log line can
be seen for redirects, templates, files, errors and streams.
"""
from django.urls import path

from django_config import views, web

urlpatterns = [
    path('', views.index, name='index'),
    path('robots.txt', web.robots, name='robots'),
    path('orders/', views.OrderListView.as_view(), name='order_list'),
    path('orders/<int:order_id>/', views.order_detail, name='order_detail'),
    path('checkout/', views.checkout, name='checkout'),
    path('login/', views.login, name='login'),
    path('download/', views.download, name='download'),
    path('fail/', views.fail, name='fail'),
    path('broken/', views.broken, name='broken'),
    path('unavailable/', views.unavailable, name='unavailable'),
    path('stream/', views.stream, name='stream'),
    path('worker/', views.worker, name='worker'),
    path('correlation/', views.correlation, name='correlation'),
]
