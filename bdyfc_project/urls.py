"""
URL configuration for bdyfc_project project.
"""
from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    path('admin/', admin.site.urls),
    path('admin-panel/', include('registrations.admin_urls')),  # Staff exports
    path('api/', include('registrations.api_urls')),
]
