"""
URL configuration for authentication module.
"""

from django.urls import path
from . import views

app_name = 'authentication'

urlpatterns = [
    path('signup', views.signup_view, name='signup'),
    path('login', views.login_view, name='login'),
    path('logout', views.logout_view, name='logout'),
    path('me', views.me_view, name='me'),
]
