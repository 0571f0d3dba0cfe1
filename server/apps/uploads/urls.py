"""URL routes for uploads app."""

from django.urls import path

from server.apps.uploads import views

app_name = 'uploads'

urlpatterns = [
    path('upload', views.upload_view, name='upload'),
    path(
        'uploads/<str:stored_name>',
        views.serve_upload_view,
        name='stored-file',
    ),
]
