"""
Server-side grading for lesson quizzes and the certificate exam.

The answer key is read through questions.list_with_answers(..., GRADER) and
never leaves this module; results only carry scores.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone

from apps.core.exceptions import AuthorizationError, NotFound, ValidationError
from apps.core.utils import log_audit_action, round_half_up_div

from .access import can_open_lesson, has_course_access, lesson_completion
from .models import CertificateExam, QuizAttempt
from .certificate_models import Certificate
from .questions import GRADER, exam_questions, quiz_questions

logger = logging.getLogger(__name__)


# --- Results ---

@dataclass(frozen=True)
class QuizResult:
    score: int
    total_questions: int
    passed: bool
    already_passed: bool = False

    @property
    def percentage(self):
        return round_half_up_div(100 * self.score, self.total_questions) if self.total_questions else 0

    def to_dict(self):
        return {
            'score': self.score,
            'total_questions': self.total_questions,
            'passed': self.passed,
            'percentage': self.percentage,
            'already_passed': self.already_passed,
        }


@dataclass(frozen=True)
class ExamResult:
    passed: bool
    score: int
    total_questions: int
    percentage: int
    passing_score: Optional[int] = None
    certificate: Optional[Certificate] = None
    already_issued: bool = False

    def to_dict(self):
        data = {
            'passed': self.passed,
            'score': self.score,
            'total_questions': self.total_questions,
            'percentage': self.percentage,
        }
        if self.certificate is not None:
            data.update({
                'issued_at': self.certificate.issued_at.isoformat(),
                'certificate_number': self.certificate.certificate_number,
                'recipient_name': self.certificate.recipient_name,
                'already_issued': self.already_issued,
            })
        else:
            data['passing_score'] = self.passing_score
        return data


# --- Exam state ---

@dataclass(frozen=True)
class NotEligible:
    reason: str
    completed_lessons: int = 0
    total_lessons: int = 0
    state = 'not_eligible'

    MESSAGES = {
        'not_purchased': "Purchase this course to take the certificate exam.",
        'no_lessons': "This course has no lessons yet.",
        'lessons_incomplete': "Complete all lessons to unlock the certificate exam.",
    }

    @property
    def message(self):
        return self.MESSAGES.get(self.reason, "You are not eligible for this exam yet.")


@dataclass(frozen=True)
class Eligible:
    exam: Optional[CertificateExam]
    completed_lessons: int
    total_lessons: int
    state = 'eligible'


@dataclass(frozen=True)
class Certified:
    certificate: Certificate
    state = 'certified'


def resolve_exam_state(user, course):
    """
    Decide where the user stands with the course's certificate exam.

    An existing certificate wins over everything else, so a certified learner
    never re-enters the exam.
    """
    certificate = Certificate.objects.filter(user=user, course=course).first()
    if certificate is not None:
        return Certified(certificate)

    completed, total = lesson_completion(user, course)
    if not has_course_access(user, course):
        return NotEligible('not_purchased', completed, total)
    if total == 0:
        return NotEligible('no_lessons', completed, total)
    if completed < total:
        return NotEligible('lessons_incomplete', completed, total)

    exam = CertificateExam.objects.filter(course=course).first()
    return Eligible(exam, completed, total)


def exam_state_summary(state):
    """JSON-ready description of an exam state."""
    data = {'state': state.state}
    if isinstance(state, Certified):
        data['certificate'] = state.certificate.to_dict()
        return data

    data['completed_lessons'] = state.completed_lessons
    data['total_lessons'] = state.total_lessons
    if isinstance(state, NotEligible):
        data['reason'] = state.reason
        data['message'] = state.message
    else:
        exam = state.exam
        data['passing_score'] = exam.passing_score if exam else None
        data['question_count'] = exam_questions.count(exam) if exam else 0
    return data


# --- Grading ---

def _normalise_answers(answers):
    """Turn {"<question id>": <option index>} into {int: int}."""
    if not isinstance(answers, dict):
        raise ValidationError("answers must be an object mapping question id to option index.")

    normalised = {}
    for key, value in answers.items():
        try:
            question_id = int(key)
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid question id: {key!r}.")
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValidationError(f"Answer for question {question_id} must be an option index.")
        normalised[question_id] = value
    return normalised


def _score(questions, answers):
    return sum(1 for question in questions if answers.get(question.id) == question.correct_option_index)


def quiz_pass_mark(total_questions):
    """Smallest passing score: ceil(QUIZ_PASS_PERCENT% of total)."""
    percent = getattr(settings, 'QUIZ_PASS_PERCENT', 70)
    return (percent * total_questions + 99) // 100


def submit_quiz_answers(user, lesson, answers):
    """
    Grade a lesson quiz and upsert the user's attempt.

    A passed attempt is terminal: later submissions return it untouched.
    Grading does not mark lesson progress.
    """
    if not can_open_lesson(user, lesson):
        raise AuthorizationError("Purchase this course to take the lesson quiz.")

    answers = _normalise_answers(answers)
    questions = quiz_questions.list_with_answers(lesson, GRADER)
    if not questions:
        raise NotFound("This lesson has no quiz.")

    total = len(questions)
    score = _score(questions, answers)
    passed = score >= quiz_pass_mark(total)
    stored_answers = {str(question_id): index for question_id, index in answers.items()}

    with transaction.atomic():
        attempt, created = QuizAttempt.objects.select_for_update().get_or_create(
            user=user,
            lesson=lesson,
            defaults={
                'score': score,
                'total_questions': total,
                'passed': passed,
                'answers': stored_answers,
            }
        )
        if not created:
            if attempt.passed:
                return QuizResult(attempt.score, attempt.total_questions, True, already_passed=True)
            attempt.score = score
            attempt.total_questions = total
            attempt.passed = passed
            attempt.answers = stored_answers
            attempt.completed_at = timezone.now()
            attempt.save()

    logger.info(f"Quiz graded: user={user.id} lesson={lesson.id} score={score}/{total} passed={passed}")
    return QuizResult(score, total, passed)


def _result_for_certificate(certificate, already_issued=True):
    return ExamResult(
        passed=True,
        score=certificate.score,
        total_questions=certificate.total_questions,
        percentage=certificate.percentage,
        certificate=certificate,
        already_issued=already_issued,
    )


def clean_recipient_name(recipient_name):
    name = recipient_name.strip() if isinstance(recipient_name, str) else ''
    if not name:
        raise ValidationError("Please enter the name to print on the certificate.")
    if len(name) > 255:
        raise ValidationError("Name must be at most 255 characters.")
    return name


def submit_exam_answers(user, course, answers, recipient_name):
    """
    Grade the certificate exam and issue the certificate on a pass.

    Eligibility is re-checked here. Failed attempts are not stored.
    """
    state = resolve_exam_state(user, course)
    if isinstance(state, Certified):
        return _result_for_certificate(state.certificate)
    if isinstance(state, NotEligible):
        raise AuthorizationError(state.message, reason=state.reason)

    name = clean_recipient_name(recipient_name)

    exam = state.exam
    if exam is None:
        raise NotFound("This course has no certificate exam.")

    answers = _normalise_answers(answers)
    questions = exam_questions.list_with_answers(exam, GRADER)
    if not questions:
        raise NotFound("This course has no certificate exam.")

    total = len(questions)
    score = _score(questions, answers)
    percentage = round_half_up_div(100 * score, total)

    if percentage < exam.passing_score:
        logger.info(f"Exam failed: user={user.id} course={course.id} {percentage}% < {exam.passing_score}%")
        return ExamResult(
            passed=False,
            score=score,
            total_questions=total,
            percentage=percentage,
            passing_score=exam.passing_score,
        )

    try:
        with transaction.atomic():
            certificate = Certificate.objects.create(
                user=user,
                course=course,
                recipient_name=name,
                score=score,
                total_questions=total,
            )
    except IntegrityError:
        # A concurrent submission issued it first
        certificate = Certificate.objects.get(user=user, course=course)
        return _result_for_certificate(certificate)

    logger.info(f"Certificate {certificate.certificate_number} issued to user={user.id} course={course.id}")
    log_audit_action(
        None, 'issue',
        f"Issued certificate {certificate.certificate_number} for '{course.title}' ({percentage}%)",
        target_type='certificate', target_id=certificate.id, user=user
    )
    return ExamResult(
        passed=True,
        score=score,
        total_questions=total,
        percentage=percentage,
        certificate=certificate,
    )
