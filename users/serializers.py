from django.contrib.auth import get_user_model
from django.db import transaction
from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

from .models import Student, Teacher

User = get_user_model()


class UserSerializer(serializers.ModelSerializer):
    student_id = serializers.IntegerField(source='student.id', read_only=True, default=None)
    teacher_id = serializers.IntegerField(source='teacher.id', read_only=True, default=None)

    class Meta:
        model = User
        fields = [
            'id', 'email', 'first_name', 'last_name', 'role', 'is_staff',
            'bio', 'avatar', 'student_id', 'teacher_id'
        ]
        read_only_fields = ['is_staff', 'role']


class RegisterSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True)

    class Meta:
        model = User
        fields = ['id', 'email', 'first_name', 'last_name', 'password', 'role']
        read_only_fields = ['id']

    @transaction.atomic
    def create(self, validated_data):
        user = User.objects.create_user(
            username=validated_data['email'],
            email=validated_data['email'],
            password=validated_data['password'],
            first_name=validated_data['first_name'],
            last_name=validated_data['last_name'],
            role=validated_data.get('role', User.Role.STUDENT)
        )
        # Every student/teacher account gets its profile row up front
        if user.role == User.Role.STUDENT:
            Student.objects.create(user=user)
        elif user.role == User.Role.TEACHER:
            Teacher.objects.create(user=user)
        return user


class PublicRegisterSerializer(RegisterSerializer):
    """Self sign-up only ever produces student accounts."""

    def validate_role(self, value):
        if value != User.Role.STUDENT:
            raise serializers.ValidationError("Only student accounts can self-register.")
        return value


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    def validate(self, attrs):
        data = super().validate(attrs)
        data['user'] = UserSerializer(self.user).data
        return data
