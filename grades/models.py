from django.db import models
from django.db.models import Q

from courses.models import Course, Program
from users.models import Student


class GradeCalculation(models.Model):
    """
    Derived grade for one student in one course or program.
    Always re-derivable from attempts and attendance; recomputed on demand.
    """
    student = models.ForeignKey(Student, on_delete=models.CASCADE, related_name='grade_calculations')
    course = models.ForeignKey(Course, on_delete=models.CASCADE, null=True, blank=True, related_name='grades')
    program = models.ForeignKey(Program, on_delete=models.CASCADE, null=True, blank=True, related_name='grades')

    exam_score = models.DecimalField(max_digits=5, decimal_places=2, default=0)
    attendance_score = models.DecimalField(max_digits=5, decimal_places=2, default=0)
    final_grade = models.DecimalField(max_digits=5, decimal_places=2, default=0)
    letter_grade = models.CharField(max_length=2)
    gpa = models.DecimalField(max_digits=3, decimal_places=2, default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-updated_at']
        constraints = [
            models.UniqueConstraint(
                fields=['student', 'course'], condition=Q(course__isnull=False), name='unique_course_grade'
            ),
            models.UniqueConstraint(
                fields=['student', 'program'], condition=Q(program__isnull=False), name='unique_program_grade'
            ),
        ]

    def __str__(self):
        return f"{self.student} {self.course or self.program}: {self.letter_grade}"
