"""
URL configuration for the Visa Guide API.
"""

from django.urls import path

from .api import api

urlpatterns = [
    path("api/", api.urls),
]
