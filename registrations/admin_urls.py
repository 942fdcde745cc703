"""
URL patterns for staff exports.
"""
from django.urls import path
from . import admin_views

urlpatterns = [
    path('quiz-registrations/export/', admin_views.export_quiz_registrations, name='export_quiz_registrations'),
    path(
        'quiz-registrations/<uuid:registration_id>/form.pdf',
        admin_views.download_registration_form,
        name='download_registration_form',
    ),
]
