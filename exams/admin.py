from django.contrib import admin

# Register your models here.
from .models import Exam, Question, Choice


class ChoiceInline(admin.TabularInline):
    model = Choice
    extra = 0


@admin.register(Question)
class QuestionAdmin(admin.ModelAdmin):
    list_display = ('text', 'exam', 'points', 'order')
    inlines = [ChoiceInline]


admin.site.register(Exam)
