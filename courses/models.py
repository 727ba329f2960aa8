# lms_platform/courses/models.py
from django.core.exceptions import ValidationError
from django.db import models

from users.models import Student, Teacher


class Course(models.Model):
    name = models.CharField(max_length=255)
    slug = models.SlugField(max_length=255, unique=True)
    description = models.TextField(blank=True)
    teacher = models.ForeignKey(Teacher, on_delete=models.SET_NULL, null=True, blank=True, related_name='courses')
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.name


class Program(models.Model):
    name = models.CharField(max_length=255)
    slug = models.SlugField(max_length=255, unique=True)
    description = models.TextField(blank=True)
    teacher = models.ForeignKey(Teacher, on_delete=models.SET_NULL, null=True, blank=True, related_name='programs')
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.name


class EnrollmentStatus(models.TextChoices):
    ACTIVE = "ACTIVE", "Active"
    COMPLETED = "COMPLETED", "Completed"
    DROPPED = "DROPPED", "Dropped"


class Enrollment(models.Model):
    student = models.ForeignKey(Student, on_delete=models.CASCADE, related_name='enrollments')
    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name='enrollments')
    status = models.CharField(max_length=20, choices=EnrollmentStatus.choices, default=EnrollmentStatus.ACTIVE)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = ('student', 'course')

    def __str__(self):
        return f"{self.student} -> {self.course}"


class ProgramEnrollment(models.Model):
    student = models.ForeignKey(Student, on_delete=models.CASCADE, related_name='program_enrollments')
    program = models.ForeignKey(Program, on_delete=models.CASCADE, related_name='enrollments')
    status = models.CharField(max_length=20, choices=EnrollmentStatus.choices, default=EnrollmentStatus.ACTIVE)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = ('student', 'program')

    def __str__(self):
        return f"{self.student} -> {self.program}"


class ScheduledSession(models.Model):
    """A dated class, exam or review meeting of exactly one course or program."""

    class SessionType(models.TextChoices):
        CLASS = "CLASS", "Class"
        EXAM = "EXAM", "Exam"
        REVIEW = "REVIEW", "Review"

    course = models.ForeignKey(Course, on_delete=models.CASCADE, null=True, blank=True, related_name='sessions')
    program = models.ForeignKey(Program, on_delete=models.CASCADE, null=True, blank=True, related_name='sessions')
    title = models.CharField(max_length=255, blank=True)
    type = models.CharField(max_length=10, choices=SessionType.choices, default=SessionType.CLASS)
    date = models.DateField()
    start_time = models.TimeField(null=True, blank=True)
    end_time = models.TimeField(null=True, blank=True)
    exam = models.ForeignKey('exams.Exam', on_delete=models.SET_NULL, null=True, blank=True, related_name='sessions')

    class Meta:
        ordering = ['date', 'start_time']

    def __str__(self):
        return f"{self.get_type_display()} on {self.date}"

    def clean(self):
        if bool(self.course_id) == bool(self.program_id):
            raise ValidationError("A session belongs to exactly one course or program.")

    @property
    def owner(self):
        """The Teacher running the course/program this session belongs to."""
        parent = self.course or self.program
        return parent.teacher if parent else None

    def enrollment_for(self, student):
        if self.course_id:
            return Enrollment.objects.filter(student=student, course_id=self.course_id).first()
        return ProgramEnrollment.objects.filter(student=student, program_id=self.program_id).first()

    def enrolled_students(self):
        if self.course_id:
            return Student.objects.filter(enrollments__course_id=self.course_id)
        return Student.objects.filter(program_enrollments__program_id=self.program_id)
