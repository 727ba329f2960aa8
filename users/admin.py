from django.contrib import admin
from django.contrib.auth.admin import UserAdmin

from .models import User, Student, Teacher


@admin.register(User)
class LmsUserAdmin(UserAdmin):
    list_display = ('email', 'first_name', 'last_name', 'role', 'is_staff')
    list_filter = ('role', 'is_staff', 'is_active')
    fieldsets = UserAdmin.fieldsets + (
        ('Profile', {'fields': ('role', 'phone_number', 'bio', 'avatar')}),
    )


admin.site.register(Student)
admin.site.register(Teacher)
