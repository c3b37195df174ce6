"""Pending registrations API URLs"""
from django.urls import path

from .views.pending import pending_approve_view, pending_list_view, pending_reject_view

urlpatterns = [
    path('', pending_list_view),
    path('<int:pk>/approve/', pending_approve_view),
    path('<int:pk>/', pending_reject_view),
]
