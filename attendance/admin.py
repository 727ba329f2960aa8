from django.contrib import admin

from .models import SessionAttendance


@admin.register(SessionAttendance)
class SessionAttendanceAdmin(admin.ModelAdmin):
    list_display = ('session', 'student', 'status', 'marked_by', 'joined_at')
    list_filter = ('status', 'marked_by')
