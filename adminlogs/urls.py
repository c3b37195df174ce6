from django.urls import path

from .views import admin_logs_view

urlpatterns = [
    path('', admin_logs_view),
]
