# lms_platform/users/models.py
from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    class Role(models.TextChoices):
        STUDENT = "STUDENT", "Student"
        TEACHER = "TEACHER", "Teacher"
        SUPER_ADMIN = "SUPER_ADMIN", "Super Admin"
        REGISTRAR = "REGISTRAR", "Registrar"

    ADMIN_ROLES = (Role.SUPER_ADMIN, Role.REGISTRAR)

    # Enforce unique email for authentication
    email = models.EmailField(unique=True)

    role = models.CharField(max_length=20, choices=Role.choices, default=Role.STUDENT)
    phone_number = models.CharField(max_length=15, blank=True)

    bio = models.TextField(blank=True)
    avatar = models.ImageField(upload_to="avatars/", blank=True, null=True)

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['username', 'first_name', 'last_name']

    def __str__(self):
        return self.email

    @property
    def display_name(self):
        full_name = self.get_full_name()
        return full_name or self.email

    @property
    def is_admin_role(self):
        return self.is_staff or self.role in self.ADMIN_ROLES


class Student(models.Model):
    """Learner profile; owns enrollments, attempts, attendance and grades."""
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='student')
    student_number = models.CharField(max_length=30, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"Student {self.user.email}"


class Teacher(models.Model):
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='teacher')
    department = models.CharField(max_length=100, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"Teacher {self.user.email}"
