from django.db import models

from courses.models import ScheduledSession
from users.models import Student


class SessionAttendance(models.Model):
    class Status(models.TextChoices):
        PRESENT = "PRESENT", "Present"
        ABSENT = "ABSENT", "Absent"

    class MarkedBy(models.TextChoices):
        AUTO = "AUTO", "Auto (student joined)"
        TEACHER = "TEACHER", "Teacher"

    session = models.ForeignKey(ScheduledSession, on_delete=models.CASCADE, related_name='attendance')
    student = models.ForeignKey(Student, on_delete=models.CASCADE, related_name='attendance')
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.PRESENT)
    joined_at = models.DateTimeField(null=True, blank=True)
    marked_by = models.CharField(max_length=10, choices=MarkedBy.choices, default=MarkedBy.AUTO)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        unique_together = ('session', 'student')

    def __str__(self):
        return f"{self.student} @ {self.session}: {self.status}"
