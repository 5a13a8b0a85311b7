from django.contrib import admin
from .models import User

@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ("email", "is_owner", "is_client", "phone", "full_name")
    search_fields = ("email", "phone", "full_name")
    list_filter = ("is_owner", "is_client", "is_active")
    exclude = ("password",)
