from django.contrib import admin

from .models import Course, Program, Enrollment, ProgramEnrollment, ScheduledSession


@admin.register(Course, Program)
class OfferingAdmin(admin.ModelAdmin):
    list_display = ('name', 'teacher', 'is_active')
    prepopulated_fields = {'slug': ('name',)}


@admin.register(Enrollment)
class EnrollmentAdmin(admin.ModelAdmin):
    list_display = ('student', 'course', 'status', 'created_at')
    list_filter = ('status',)


@admin.register(ProgramEnrollment)
class ProgramEnrollmentAdmin(admin.ModelAdmin):
    list_display = ('student', 'program', 'status', 'created_at')
    list_filter = ('status',)


@admin.register(ScheduledSession)
class ScheduledSessionAdmin(admin.ModelAdmin):
    list_display = ('date', 'type', 'course', 'program', 'exam')
    list_filter = ('type',)
