# lms_platform/exams/models.py
from django.db import models
from django.db.models import Sum


class Exam(models.Model):
    # Course exams and program exams share one table; exactly one parent is set
    course = models.ForeignKey('courses.Course', on_delete=models.CASCADE, null=True, blank=True, related_name='exams')
    program = models.ForeignKey('courses.Program', on_delete=models.CASCADE, null=True, blank=True, related_name='exams')

    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)

    total_points = models.PositiveIntegerField(default=0)
    time_limit = models.PositiveIntegerField(null=True, blank=True, help_text="Minutes; informational only")
    max_tab_switch = models.PositiveIntegerField(default=3)

    is_published = models.BooleanField(default=False)
    order = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['order', 'id']

    def __str__(self):
        return self.title

    @property
    def owner(self):
        parent = self.course or self.program
        return parent.teacher if parent else None

    def refresh_total_points(self):
        total = self.questions.aggregate(total=Sum('points'))['total'] or 0
        if total != self.total_points:
            self.total_points = total
            self.save(update_fields=['total_points'])
        return total


class Question(models.Model):
    exam = models.ForeignKey(Exam, related_name='questions', on_delete=models.CASCADE)
    text = models.TextField()  # Frontend sends 'question_text'
    points = models.PositiveIntegerField(default=1)
    order = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ['order', 'id']

    def __str__(self):
        return f"{self.text[:50]}..."

    def save(self, *args, **kwargs):
        previous_exam_id = None
        if self.pk:
            previous_exam_id = Question.objects.filter(pk=self.pk).values_list('exam_id', flat=True).first()
        super().save(*args, **kwargs)
        self.exam.refresh_total_points()
        # Moving a question also changes the total of the exam it left
        if previous_exam_id is not None and previous_exam_id != self.exam_id:
            Exam.objects.get(pk=previous_exam_id).refresh_total_points()

    def delete(self, *args, **kwargs):
        exam = self.exam
        result = super().delete(*args, **kwargs)
        exam.refresh_total_points()
        return result


class Choice(models.Model):
    question = models.ForeignKey(Question, related_name='choices', on_delete=models.CASCADE)
    text = models.CharField(max_length=255)
    # One correct choice per question in practice; not enforced by the database
    is_correct = models.BooleanField(default=False)
    order = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ['order', 'id']

    def __str__(self):
        return self.text
