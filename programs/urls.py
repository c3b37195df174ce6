"""Program and Task API URLs"""
from django.urls import path

from .views.api import program_detail_view, programs_view, task_detail_view, tasks_view

urlpatterns = [
    path('programs/', programs_view),
    path('programs/<int:pk>/', program_detail_view),
    path('tasks/', tasks_view),
    path('tasks/<int:pk>/', task_detail_view),
]
