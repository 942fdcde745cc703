"""
API URL patterns for the registrations app.
"""
from django.urls import path
from . import views

urlpatterns = [
    path('bible-quiz-registration/', views.bible_quiz_registration, name='bible_quiz_registration'),
    path('send-otp/', views.send_otp, name='send_otp'),
    path('verify-otp/', views.verify_otp, name='verify_otp'),
    path('send-confirmation/', views.send_confirmation, name='send_confirmation'),
]
