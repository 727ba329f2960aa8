# assessments/models.py
from django.db import models

from courses.models import ScheduledSession
from exams.models import Exam, Question, Choice
from users.models import Student


class ExamAttempt(models.Model):
    """Tracks one student's run-through of an exam, optionally inside a session."""

    class Status(models.TextChoices):
        IN_PROGRESS = "IN_PROGRESS", "In progress"
        SUBMITTED = "SUBMITTED", "Submitted"
        FLAGGED = "FLAGGED", "Flagged"

    OPEN_STATUSES = (Status.IN_PROGRESS, Status.FLAGGED)

    exam = models.ForeignKey(Exam, on_delete=models.CASCADE, related_name='attempts')
    student = models.ForeignKey(Student, on_delete=models.CASCADE, related_name='exam_attempts')
    session = models.ForeignKey(
        ScheduledSession, on_delete=models.SET_NULL, null=True, blank=True, related_name='exam_attempts'
    )

    # 1-based, counted across every session for this exam+student
    attempt_number = models.PositiveIntegerField(default=1)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.IN_PROGRESS)
    tab_switch_count = models.PositiveIntegerField(default=0)

    score = models.DecimalField(max_digits=7, decimal_places=2, null=True, blank=True)
    started_at = models.DateTimeField(auto_now_add=True)
    submitted_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ['-started_at', '-id']
        indexes = [
            models.Index(fields=['exam', 'student', 'session']),
        ]

    def __str__(self):
        return f"{self.student} - {self.exam.title} #{self.attempt_number}"

    @property
    def is_open(self):
        return self.status in self.OPEN_STATUSES

    @property
    def percentage(self):
        if self.score is None or not self.exam.total_points:
            return None
        return self.score * 100 / self.exam.total_points


class ExamAnswer(models.Model):
    attempt = models.ForeignKey(ExamAttempt, related_name='answers', on_delete=models.CASCADE)
    question = models.ForeignKey(Question, on_delete=models.CASCADE)
    choice = models.ForeignKey(Choice, null=True, blank=True, on_delete=models.SET_NULL)

    # Snapshot of the choice's correctness at answer time
    is_correct = models.BooleanField(default=False)
    answered_at = models.DateTimeField(auto_now=True)

    class Meta:
        unique_together = ('attempt', 'question')
