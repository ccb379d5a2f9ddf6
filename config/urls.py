"""
URL Configuration for the Mindly course marketplace.
"""
from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    # Course / instructor CRUD stays in the Django admin site
    path('django-admin/', admin.site.urls),

    path('auth/', include('apps.authentication.urls')),
    path('admin/', include('apps.admin_portal.urls')),
    path('', include('apps.purchasing.urls')),
    path('', include('apps.learning.urls')),
]
