"""
URLs for accounts app
"""
from django.urls import path

from .views import auth

app_name = 'accounts'

urlpatterns = [
    path('login', auth.login_view, name='login'),
    path('logout', auth.logout_view, name='logout'),
    path('me', auth.me_view, name='me'),
    path('change-password', auth.change_password_view, name='change-password'),
    path('register', auth.register_view, name='register'),
    path('password-reset', auth.password_reset_request_view, name='password-reset'),
    path('password-reset/confirm', auth.password_reset_confirm_view, name='password-reset-confirm'),
]
