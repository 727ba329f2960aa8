from rest_framework import serializers
from .models import ExamAttempt
from exams.serializers import TakingExamSerializer


class StartExamSerializer(serializers.Serializer):
    sessionId = serializers.IntegerField(required=False, allow_null=True)


class AnswerSerializer(serializers.Serializer):
    questionId = serializers.IntegerField()
    choiceId = serializers.IntegerField(required=False, allow_null=True)


class AttemptStartSerializer(serializers.ModelSerializer):
    """What the student sees when an attempt starts or resumes. No correct answers."""
    attemptId = serializers.IntegerField(source='id', read_only=True)
    exam = TakingExamSerializer(read_only=True)
    startedAt = serializers.DateTimeField(source='started_at', read_only=True)
    tabSwitchCount = serializers.IntegerField(source='tab_switch_count', read_only=True)
    attemptNumber = serializers.IntegerField(source='attempt_number', read_only=True)

    class Meta:
        model = ExamAttempt
        fields = ['attemptId', 'exam', 'startedAt', 'tabSwitchCount', 'attemptNumber', 'status']


class ExamAttemptSerializer(serializers.ModelSerializer):
    """Lightweight serializer for lists / dashboard history."""
    examId = serializers.IntegerField(source='exam_id', read_only=True)
    examTitle = serializers.CharField(source='exam.title', read_only=True)
    sessionId = serializers.IntegerField(source='session_id', read_only=True)
    attemptNumber = serializers.IntegerField(source='attempt_number', read_only=True)
    tabSwitchCount = serializers.IntegerField(source='tab_switch_count', read_only=True)
    startedAt = serializers.DateTimeField(source='started_at', read_only=True)
    submittedAt = serializers.DateTimeField(source='submitted_at', read_only=True)

    class Meta:
        model = ExamAttempt
        fields = [
            'id', 'examId', 'examTitle', 'sessionId', 'attemptNumber', 'status',
            'tabSwitchCount', 'score', 'startedAt', 'submittedAt'
        ]
