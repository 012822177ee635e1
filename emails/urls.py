from django.urls import path
from .views import SendEmailView, WelcomeEmailView, PasswordResetEmailView

urlpatterns = [
    path('send/', SendEmailView.as_view(), name='email-send'),
    path('welcome/', WelcomeEmailView.as_view(), name='email-welcome'),
    path('password-reset/', PasswordResetEmailView.as_view(), name='email-password-reset'),
]
