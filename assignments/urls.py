"""Assignment API URLs"""
from django.urls import path

from .views.api import assignment_detail_view, assignments_view

urlpatterns = [
    path('', assignments_view),
    path('<int:pk>/', assignment_detail_view),
]
