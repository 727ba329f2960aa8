from django.contrib import admin

from .models import ExamAttempt, ExamAnswer


class ExamAnswerInline(admin.TabularInline):
    model = ExamAnswer
    extra = 0
    readonly_fields = ('question', 'choice', 'is_correct', 'answered_at')


@admin.register(ExamAttempt)
class ExamAttemptAdmin(admin.ModelAdmin):
    list_display = ('exam', 'student', 'attempt_number', 'status', 'tab_switch_count', 'score', 'started_at')
    list_filter = ('status',)
    inlines = [ExamAnswerInline]
