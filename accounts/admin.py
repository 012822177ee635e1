from django.contrib import admin

# Register your models here.
from .models import CustomUser, PasswordResetToken
admin.site.register(CustomUser)
admin.site.register(PasswordResetToken)
