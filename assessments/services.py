"""
Exam attempt lifecycle.

    IN_PROGRESS --tab switch below threshold--> IN_PROGRESS
    IN_PROGRESS --tab switch reaching threshold--> FLAGGED
    IN_PROGRESS | FLAGGED --submit--> SUBMITTED

FLAGGED marks the attempt for human review; the student can keep
answering and can still submit. Every transition runs in a transaction
holding a row lock, so concurrent starts for one student and concurrent
submits of one attempt are serialized.
"""
import logging
from decimal import Decimal

from django.db import transaction
from django.shortcuts import get_object_or_404
from django.utils import timezone
from rest_framework.exceptions import NotFound, ValidationError

from analytics.tracking import track_event
from cores.exceptions import Conflict
from exams.models import Exam, Choice
from grades.policy import quantize
from users.models import Student
from .models import ExamAttempt, ExamAnswer

logger = logging.getLogger(__name__)


def _open_attempt_for_update(attempt_id, student):
    attempt = (
        ExamAttempt.objects.select_for_update()
        .select_related('exam')
        .filter(id=attempt_id, student=student, status__in=ExamAttempt.OPEN_STATUSES)
        .first()
    )
    if attempt is None:
        raise NotFound("Attempt not found or already submitted")
    return attempt


def start_attempt(exam_id, student, session=None):
    """
    Returns (attempt, created). An open attempt for the same exam and
    session is resumed as-is; a submitted one is a Conflict.
    """
    exam = Exam.objects.filter(id=exam_id, is_published=True).first()
    if exam is None:
        raise NotFound("Exam not found or not published")
    if session is not None and (session.course_id, session.program_id) != (exam.course_id, exam.program_id):
        raise ValidationError({"sessionId": "Session does not belong to this exam's course or program."})

    with transaction.atomic():
        # Serializes concurrent starts by the same student
        Student.objects.select_for_update().get(pk=student.pk)

        existing = (
            ExamAttempt.objects
            .filter(exam=exam, student=student, session=session)
            .order_by('-attempt_number')
            .first()
        )
        if existing is not None:
            if existing.is_open:
                return existing, False
            raise Conflict("Already completed this exam in this session")

        prior_attempts = ExamAttempt.objects.filter(exam=exam, student=student).count()
        attempt = ExamAttempt.objects.create(
            exam=exam,
            student=student,
            session=session,
            attempt_number=prior_attempts + 1,
            status=ExamAttempt.Status.IN_PROGRESS,
        )

    logger.info("Student %s started exam %s (attempt %s, #%d)", student.id, exam.id, attempt.id, attempt.attempt_number)
    track_event('EXAM_STARTED', student.user, {'examId': exam.id, 'attemptId': attempt.id})
    return attempt, True


@transaction.atomic
def record_answer(attempt_id, student, question_id, choice_id=None):
    """
    Stores (or overwrites) the answer to one question. Correctness is
    captured now; later edits to the exam do not re-grade it.
    """
    attempt = _open_attempt_for_update(attempt_id, student)

    question = attempt.exam.questions.filter(id=question_id).first()
    if question is None:
        raise NotFound("Question not found in this exam")

    choice = None
    if choice_id is not None:
        choice = Choice.objects.filter(id=choice_id).first()
        if choice is None or choice.question_id != question.id:
            raise ValidationError({"choiceId": "Choice does not belong to this question."})

    answer, _ = ExamAnswer.objects.update_or_create(
        attempt=attempt,
        question=question,
        defaults={
            'choice': choice,
            'is_correct': bool(choice and choice.is_correct),
        }
    )
    return answer


@transaction.atomic
def record_tab_switch(attempt_id, student):
    attempt = _open_attempt_for_update(attempt_id, student)
    max_tab_switch = attempt.exam.max_tab_switch

    attempt.tab_switch_count += 1
    # Once flagged, stays flagged
    flagged = attempt.status == ExamAttempt.Status.FLAGGED or attempt.tab_switch_count >= max_tab_switch
    if flagged and attempt.status != ExamAttempt.Status.FLAGGED:
        attempt.status = ExamAttempt.Status.FLAGGED
        logger.warning(
            "Attempt %s flagged after %d tab switches (limit %d)",
            attempt.id, attempt.tab_switch_count, max_tab_switch
        )
    attempt.save(update_fields=['tab_switch_count', 'status'])

    return {
        'tabSwitchCount': attempt.tab_switch_count,
        'maxTabSwitch': max_tab_switch,
        'flagged': flagged,
    }


def score_attempt(attempt):
    """Sum of points of the questions whose recorded answer is correct."""
    score = 0
    for answer in attempt.answers.select_related('question'):
        if answer.is_correct:
            score += answer.question.points
    return Decimal(score)


def percentage_of(score, total_points):
    if score is None or not total_points:
        return None
    return quantize(Decimal(score) * 100 / total_points)


def submit_attempt(attempt_id, student):
    with transaction.atomic():
        attempt = (
            ExamAttempt.objects.select_for_update()
            .select_related('exam')
            .filter(id=attempt_id, student=student)
            .first()
        )
        if attempt is None:
            raise NotFound("Attempt not found")
        if attempt.status == ExamAttempt.Status.SUBMITTED:
            raise Conflict("Already submitted")

        attempt.score = score_attempt(attempt)
        attempt.status = ExamAttempt.Status.SUBMITTED
        attempt.submitted_at = timezone.now()
        attempt.save(update_fields=['score', 'status', 'submitted_at'])

    total_points = attempt.exam.total_points
    logger.info("Attempt %s submitted with score %s/%s", attempt.id, attempt.score, total_points)
    track_event('EXAM_SUBMITTED', student.user, {'examId': attempt.exam_id, 'attemptId': attempt.id})
    return {
        'score': attempt.score,
        'totalPoints': total_points,
        'percentage': percentage_of(attempt.score, total_points),
    }


def attempt_result(attempt_id, student, policy):
    """Question-by-question breakdown of one of the student's attempts."""
    attempt = get_object_or_404(
        ExamAttempt.objects.select_related('exam'), id=attempt_id, student=student
    )
    exam = attempt.exam
    answers = {a.question_id: a for a in attempt.answers.all()}

    questions = []
    for question in exam.questions.prefetch_related('choices'):
        answer = answers.get(question.id)
        selected_id = answer.choice_id if answer else None
        choices = []
        for choice in question.choices.all():
            is_selected = choice.id == selected_id
            entry = {'id': choice.id, 'text': choice.text, 'isSelected': is_selected}
            # Only the selected choice reveals whether it was right
            if is_selected:
                entry['isCorrect'] = choice.is_correct
            choices.append(entry)

        is_correct = bool(answer and answer.is_correct)
        questions.append({
            'id': question.id,
            'question': question.text,
            'points': question.points,
            'choices': choices,
            'selectedChoiceId': selected_id,
            'isCorrect': is_correct,
            'earnedPoints': question.points if is_correct else 0,
        })

    percentage = percentage_of(attempt.score, exam.total_points)
    return {
        'attemptId': attempt.id,
        'examId': exam.id,
        'examTitle': exam.title,
        'status': attempt.status,
        'score': attempt.score,
        'totalPoints': exam.total_points,
        'percentage': percentage if percentage is not None else Decimal("0.00"),
        'passed': policy.passes(percentage),
        'submittedAt': attempt.submitted_at,
        'questions': questions,
    }


def available_exams(student, *, course=None, program=None):
    exams = Exam.objects.filter(is_published=True)
    exams = exams.filter(course=course) if course is not None else exams.filter(program=program)

    results = []
    for exam in exams.order_by('order', 'id'):
        attempts = list(exam.attempts.filter(student=student).order_by('-started_at', '-id'))
        latest = attempts[0] if attempts else None
        results.append({
            'id': exam.id,
            'title': exam.title,
            'description': exam.description,
            'totalPoints': exam.total_points,
            'timeLimit': exam.time_limit,
            'attemptCount': len(attempts),
            'latestScore': latest.score if latest else None,
            'latestStatus': latest.status if latest else None,
            'latestAttemptId': latest.id if latest else None,
        })
    return results


def program_grade(student, program, policy):
    """Exam-score view of a program: latest submitted attempt per published exam."""
    total_earned = Decimal(0)
    total_possible = 0
    exam_scores = []

    for exam in program.exams.filter(is_published=True).order_by('order', 'id'):
        submitted = exam.attempts.filter(
            student=student, status=ExamAttempt.Status.SUBMITTED
        ).order_by('-submitted_at', '-id')
        latest = submitted.first()
        score = latest.score if latest else None
        if score is not None:
            total_earned += score
            total_possible += exam.total_points
        exam_scores.append({
            'examId': exam.id,
            'examTitle': exam.title,
            'totalPoints': exam.total_points,
            'score': score,
            'attemptCount': submitted.count(),
        })

    percentage = percentage_of(total_earned, total_possible)
    return {
        'programId': program.id,
        'programName': program.name,
        'examScores': exam_scores,
        'totalEarned': total_earned,
        'totalPossible': total_possible,
        'percentage': percentage,
        'passed': policy.passes(percentage) if percentage is not None else None,
    }
