from django.contrib import admin

from .models import GradeCalculation


@admin.register(GradeCalculation)
class GradeCalculationAdmin(admin.ModelAdmin):
    list_display = ('student', 'course', 'program', 'final_grade', 'letter_grade', 'gpa', 'updated_at')
    list_filter = ('letter_grade',)
    readonly_fields = ('exam_score', 'attendance_score', 'final_grade', 'letter_grade', 'gpa')
