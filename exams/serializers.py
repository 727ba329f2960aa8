# lms_platform/exams/serializers.py
from django.db import transaction
from rest_framework import serializers

from cores.models import PlatformSetting
from .models import Exam, Question, Choice

# --- Helper Serializers ---

class ChoiceSerializer(serializers.ModelSerializer):
    class Meta:
        model = Choice
        fields = ['id', 'text', 'is_correct', 'order']

# --- Question Serializers ---

class QuestionSerializer(serializers.ModelSerializer):
    # Map frontend 'question_text' to backend 'text'
    question_text = serializers.CharField(source='text')
    # Frontend sends the options as plain strings plus the text of the right one
    options = serializers.ListField(child=serializers.CharField(), required=False, write_only=True)
    correct_answer = serializers.CharField(required=False, allow_blank=True, write_only=True)
    choices = ChoiceSerializer(many=True, read_only=True)

    # Read-only field to show exam title
    exam_title = serializers.CharField(source='exam.title', read_only=True)

    class Meta:
        model = Question
        fields = [
            'id', 'exam', 'exam_title', 'question_text', 'points', 'order',
            'options', 'correct_answer', 'choices'
        ]

    def validate(self, attrs):
        options = attrs.get('options')
        correct = attrs.get('correct_answer', '').strip().lower()
        if options and correct and correct not in [o.strip().lower() for o in options]:
            raise serializers.ValidationError({"correct_answer": "Must match one of the options."})
        return attrs

    @transaction.atomic
    def create(self, validated_data):
        options_text = validated_data.pop('options', [])
        correct_ans = validated_data.pop('correct_answer', '')
        question = Question.objects.create(**validated_data)
        create_choices(question, options_text, correct_ans)
        return question

    @transaction.atomic
    def update(self, instance, validated_data):
        options_text = validated_data.pop('options', None)
        correct_ans = validated_data.pop('correct_answer', '')
        question = super().update(instance, validated_data)
        if options_text is not None:
            question.choices.all().delete()
            create_choices(question, options_text, correct_ans)
        return question


def create_choices(question, options_text, correct_answer):
    """Creates ordered choices; the one whose text matches correct_answer is marked correct."""
    correct = (correct_answer or '').strip().lower()
    for position, opt_text in enumerate(options_text):
        clean_text = opt_text.strip()
        if not clean_text:
            continue
        Choice.objects.create(
            question=question,
            text=clean_text,
            is_correct=(clean_text.lower() == correct),
            order=position
        )

# --- Exam Serializers ---

class ExamSerializer(serializers.ModelSerializer):
    # Map frontend names onto the model
    time_limit_minutes = serializers.IntegerField(source='time_limit', required=False, allow_null=True)
    max_tab_switch = serializers.IntegerField(required=False, min_value=1)

    # Read-only counts
    total_questions = serializers.IntegerField(source='questions.count', read_only=True)

    class Meta:
        model = Exam
        fields = [
            'id', 'title', 'description', 'course', 'program',
            'time_limit_minutes', 'max_tab_switch', 'total_points',
            'is_published', 'order', 'total_questions'
        ]
        read_only_fields = ['total_points']

    def validate(self, attrs):
        course = attrs.get('course', getattr(self.instance, 'course', None))
        program = attrs.get('program', getattr(self.instance, 'program', None))
        if bool(course) == bool(program):
            raise serializers.ValidationError("An exam belongs to exactly one course or program.")
        return attrs

    def create(self, validated_data):
        if 'max_tab_switch' not in validated_data:
            validated_data['max_tab_switch'] = PlatformSetting.load().default_max_tab_switch
        return super().create(validated_data)

class ExamDetailSerializer(ExamSerializer):
    """Full view for the exam builder, correct answers included."""
    questions = QuestionSerializer(many=True, read_only=True)
    class Meta(ExamSerializer.Meta):
        fields = ExamSerializer.Meta.fields + ['questions']

# --- Exam-taking Serializers (never expose is_correct) ---

class TakingChoiceSerializer(serializers.ModelSerializer):
    class Meta:
        model = Choice
        fields = ['id', 'text']

class TakingQuestionSerializer(serializers.ModelSerializer):
    question = serializers.CharField(source='text')
    choices = TakingChoiceSerializer(many=True, read_only=True)

    class Meta:
        model = Question
        fields = ['id', 'question', 'points', 'choices']

class TakingExamSerializer(serializers.ModelSerializer):
    timeLimit = serializers.IntegerField(source='time_limit', read_only=True)
    maxTabSwitch = serializers.IntegerField(source='max_tab_switch', read_only=True)
    totalPoints = serializers.IntegerField(source='total_points', read_only=True)
    questions = TakingQuestionSerializer(many=True, read_only=True)

    class Meta:
        model = Exam
        fields = ['id', 'title', 'description', 'timeLimit', 'maxTabSwitch', 'totalPoints', 'questions']
