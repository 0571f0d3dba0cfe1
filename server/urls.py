"""Root URL configuration."""

from django.urls import include, path

urlpatterns = [
    path('', include('server.apps.uploads.urls')),
]

handler500 = 'server.apps.uploads.views.server_error_view'
