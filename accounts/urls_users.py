"""Users Management API URLs"""
from django.urls import path

from .views.users import user_detail_view, user_role_view, users_list_or_create_view

urlpatterns = [
    path('', users_list_or_create_view),
    path('<int:pk>/role/', user_role_view),
    path('<int:pk>/', user_detail_view),
]
