"""
Views for Admin Portal module.

Every endpoint goes through AdminApiView, so the admin role check lives in
one mixin: anonymous callers get 401, other users 403.
"""

import logging

from django.db import transaction
from django.db.models import Count

from apps.core.api import JsonApiView, get_or_raise
from apps.core.config import get_site_config
from apps.core.exceptions import Conflict, CourseNotFound, NotFound, ValidationError
from apps.core.models import SiteSettings
from apps.core.permissions import AdminRequiredMixin
from apps.core.utils import form_errors, log_audit_action
from apps.learning.content import (
    clean_question_set, create_lesson, delete_lesson, move_lesson, replace_questions,
)
from apps.learning.forms import CertificateExamForm, LessonForm
from apps.learning.models import CertificateExam, Course, Lesson, LessonProgress
from apps.learning.questions import exam_questions, quiz_questions
from apps.purchasing.forms import PromoCodeForm
from apps.purchasing.models import PromoCode, Purchase
from apps.purchasing.reports import course_revenue_breakdown, revenue_summary
from apps.purchasing.services import approve_purchase, reject_purchase

from .forms import SiteSettingsForm, merged_form_data

logger = logging.getLogger(__name__)


class AdminApiView(AdminRequiredMixin, JsonApiView):
    """Base for all admin endpoints."""


def lesson_admin_dict(lesson):
    return {
        'id': lesson.id,
        'course_id': lesson.course_id,
        'title': lesson.title,
        'description': lesson.description,
        'order_index': lesson.order_index,
        'duration_minutes': lesson.duration_minutes,
        'video_id': lesson.video_id,
        'is_preview': lesson.is_preview,
    }


def question_admin_dict(question):
    return {
        'id': question.id,
        'question': question.question,
        'options': question.options,
        'correct_option_index': question.correct_option_index,
        'order_index': question.order_index,
    }


# --- Payments ---

class PurchaseListView(AdminApiView):
    """Purchases for bank transfer reconciliation, optionally filtered by status."""
    http_method_names = ['get']

    def get(self, request):
        purchases = Purchase.objects.select_related('user', 'course', 'promo_code')
        status = request.GET.get('status')
        if status:
            if status not in dict(Purchase.STATUS_CHOICES):
                raise ValidationError(f"Unknown status: {status}.")
            purchases = purchases.filter(status=status)

        return [
            {
                'id': purchase.id,
                'user_email': purchase.user.email,
                'user_name': purchase.user.full_name,
                'course_id': purchase.course_id,
                'course_title': purchase.course.title,
                'amount': purchase.amount,
                'payment_method': purchase.payment_method,
                'payment_id': purchase.payment_id,
                'transfer_code': purchase.transfer_code,
                'promo_code': purchase.promo_code.code if purchase.promo_code else None,
                'status': purchase.status,
                'purchased_at': purchase.purchased_at.isoformat(),
                'approved_at': purchase.approved_at.isoformat() if purchase.approved_at else None,
            }
            for purchase in purchases
        ]


class PurchaseApproveView(AdminApiView):
    http_method_names = ['post']

    def post(self, request, pk):
        purchase, changed = approve_purchase(pk, actor=request.user)
        if changed:
            log_audit_action(
                request, 'approve',
                f"Approved purchase of '{purchase.course.title}' by {purchase.user.email} ({purchase.amount})",
                target_type='purchase', target_id=purchase.id
            )
        return {'id': purchase.id, 'status': purchase.status, 'changed': changed}


class PurchaseRejectView(AdminApiView):
    """DELETE rejects a pending purchase; the learner has to submit again."""
    http_method_names = ['delete']

    def delete(self, request, pk):
        purchase = reject_purchase(pk, actor=request.user)
        log_audit_action(
            request, 'reject',
            f"Rejected purchase of '{purchase.course.title}' by {purchase.user.email} ({purchase.amount})",
            target_type='purchase', target_id=pk
        )
        return {'id': pk, 'deleted': True}


class RevenueView(AdminApiView):
    http_method_names = ['get']

    def get(self, request):
        return {
            'summary': revenue_summary(),
            'courses': course_revenue_breakdown(),
        }


# --- Promo codes ---

class PromoCodeListView(AdminApiView):
    http_method_names = ['get', 'post']

    def get(self, request):
        return [promo.to_dict() for promo in PromoCode.objects.all()]

    def post(self, request):
        payload = self.get_json()
        code = str(payload.get('code', '')).strip().upper()
        if code and PromoCode.objects.filter(code=code).exists():
            raise Conflict("A promo code with this code already exists.")

        form = PromoCodeForm(merged_form_data(PromoCode(), PromoCodeForm, payload))
        if not form.is_valid():
            raise ValidationError(errors=form_errors(form))
        promo = form.save()

        log_audit_action(request, 'create', f"Created promo code {promo.code} ({promo.discount_percent}%)",
                         target_type='promo_code', target_id=promo.id)
        self.status_code = 201
        return promo.to_dict()


class PromoCodeDetailView(AdminApiView):
    http_method_names = ['get', 'put', 'patch', 'delete']

    def get_promo(self, pk):
        return get_or_raise(PromoCode.objects.all(), NotFound, pk=pk)

    def get(self, request, pk):
        return self.get_promo(pk).to_dict()

    def put(self, request, pk):
        promo = self.get_promo(pk)
        payload = self.get_json()
        code = str(payload.get('code', promo.code)).strip().upper()
        if PromoCode.objects.filter(code=code).exclude(pk=promo.pk).exists():
            raise Conflict("A promo code with this code already exists.")

        form = PromoCodeForm(merged_form_data(promo, PromoCodeForm, payload), instance=promo)
        if not form.is_valid():
            raise ValidationError(errors=form_errors(form))
        promo = form.save()

        log_audit_action(request, 'update', f"Updated promo code {promo.code}",
                         target_type='promo_code', target_id=promo.id)
        return promo.to_dict()

    patch = put

    def delete(self, request, pk):
        promo = self.get_promo(pk)
        code = promo.code
        promo.delete()
        log_audit_action(request, 'delete', f"Deleted promo code {code}",
                         target_type='promo_code', target_id=pk)
        return {'id': pk, 'deleted': True}


# --- Course content ---

class LessonListView(AdminApiView):
    """Lessons of a course in order; POST appends a new lesson."""
    http_method_names = ['get', 'post']

    def get_course(self, course_id):
        return get_or_raise(Course.objects.all(), CourseNotFound, pk=course_id)

    def get(self, request, course_id):
        course = self.get_course(course_id)
        return [lesson_admin_dict(lesson) for lesson in course.lessons.order_by('order_index')]

    def post(self, request, course_id):
        course = self.get_course(course_id)
        form = LessonForm(merged_form_data(Lesson(), LessonForm, self.get_json()))
        if not form.is_valid():
            raise ValidationError(errors=form_errors(form))
        lesson = create_lesson(course, form)

        log_audit_action(request, 'create', f"Added lesson '{lesson.title}' to '{course.title}'",
                         target_type='lesson', target_id=lesson.id)
        self.status_code = 201
        return lesson_admin_dict(lesson)


class LessonDetailView(AdminApiView):
    http_method_names = ['get', 'put', 'patch', 'delete']

    def get_lesson(self, pk):
        return get_or_raise(Lesson.objects.select_related('course'), NotFound, pk=pk)

    def get(self, request, pk):
        return lesson_admin_dict(self.get_lesson(pk))

    def put(self, request, pk):
        lesson = self.get_lesson(pk)
        form = LessonForm(merged_form_data(lesson, LessonForm, self.get_json()), instance=lesson)
        if not form.is_valid():
            raise ValidationError(errors=form_errors(form))
        lesson = form.save()
        return lesson_admin_dict(lesson)

    patch = put

    def delete(self, request, pk):
        lesson = self.get_lesson(pk)
        title = lesson.title
        course = delete_lesson(lesson)
        log_audit_action(request, 'delete', f"Deleted lesson '{title}' from '{course.title}'",
                         target_type='lesson', target_id=pk)
        return {'id': pk, 'deleted': True, 'lessons_count': course.lessons_count}


class LessonMoveView(AdminApiView):
    """POST {"direction": "up"|"down"} swaps the lesson with its neighbour."""
    http_method_names = ['post']

    def post(self, request, pk):
        lesson = get_or_raise(Lesson.objects.all(), NotFound, pk=pk)
        lessons = move_lesson(lesson, self.get_json().get('direction'))
        log_audit_action(request, 'update', f"Moved lesson '{lesson.title}'",
                         target_type='lesson', target_id=pk)
        return [lesson_admin_dict(item) for item in lessons]


class QuizQuestionSetView(AdminApiView):
    """
    Quiz questions of a lesson including the answer key. PUT replaces the set.
    """
    http_method_names = ['get', 'put']

    def get(self, request, pk):
        lesson = get_or_raise(Lesson.objects.all(), NotFound, pk=pk)
        questions = quiz_questions.list_with_answers(lesson, request.user)
        return [question_admin_dict(question) for question in questions]

    def put(self, request, pk):
        lesson = get_or_raise(Lesson.objects.all(), NotFound, pk=pk)
        count = replace_questions(quiz_questions, lesson, self.get_json().get('questions'))
        log_audit_action(request, 'update', f"Saved {count} quiz questions for lesson '{lesson.title}'",
                         target_type='lesson', target_id=lesson.id)
        return self.get(request, pk)


class CertificateExamView(AdminApiView):
    """
    Certificate exam of a course. PUT sets passing_score and replaces the
    questions, creating the exam on first save.
    """
    http_method_names = ['get', 'put']

    def get(self, request, course_id):
        course = get_or_raise(Course.objects.all(), CourseNotFound, pk=course_id)
        exam = CertificateExam.objects.filter(course=course).first()
        if exam is None:
            return {'course_id': course.id, 'passing_score': None, 'questions': []}
        return {
            'course_id': course.id,
            'passing_score': exam.passing_score,
            'questions': [question_admin_dict(q) for q in exam_questions.list_with_answers(exam, request.user)],
        }

    def put(self, request, course_id):
        course = get_or_raise(Course.objects.all(), CourseNotFound, pk=course_id)
        payload = self.get_json()

        exam = CertificateExam.objects.filter(course=course).first() or CertificateExam(course=course)
        form = CertificateExamForm(merged_form_data(exam, CertificateExamForm, payload), instance=exam)
        if not form.is_valid():
            raise ValidationError(errors=form_errors(form))
        if 'questions' in payload:
            clean_question_set(payload['questions'])

        with transaction.atomic():
            exam = form.save()
            if 'questions' in payload:
                replace_questions(exam_questions, exam, payload['questions'])

        log_audit_action(request, 'update', f"Saved certificate exam for '{course.title}'",
                         target_type='certificate_exam', target_id=exam.id)
        return self.get(request, course_id)


# --- Learners ---

class LearnerProgressView(AdminApiView):
    """
    One row per completed purchase with lesson completion, newest activity first.
    """
    http_method_names = ['get']

    def get(self, request):
        purchases = list(
            Purchase.objects.filter(status=Purchase.STATUS_COMPLETED)
            .select_related('user', 'course')
            .annotate(total_lessons=Count('course__lessons', distinct=True))
        )

        progress_by_key = {}
        progress_rows = LessonProgress.objects.filter(
            user_id__in={p.user_id for p in purchases}
        ).select_related('lesson').order_by('-last_watched_at')
        for row in progress_rows:
            progress_by_key.setdefault((row.user_id, row.lesson.course_id), []).append(row)

        rows = []
        for purchase in purchases:
            progress = progress_by_key.get((purchase.user_id, purchase.course_id), [])
            latest = progress[0] if progress else None
            rows.append({
                'user_id': purchase.user_id,
                'user_email': purchase.user.email,
                'user_name': purchase.user.full_name,
                'course_id': purchase.course_id,
                'course_title': purchase.course.title,
                'completed_lessons': sum(1 for row in progress if row.completed),
                'total_lessons': purchase.total_lessons,
                'current_lesson': latest.lesson.title if latest else None,
                'last_activity': latest.last_watched_at.isoformat() if latest else None,
            })

        rows.sort(key=lambda row: row['last_activity'] or '', reverse=True)
        return rows


# --- Settings ---

class SiteSettingsView(AdminApiView):
    http_method_names = ['get', 'put', 'patch']

    def get(self, request):
        return get_site_config().to_dict()

    def put(self, request):
        record = SiteSettings.load()
        form = SiteSettingsForm(merged_form_data(record, SiteSettingsForm, self.get_json()), instance=record)
        if not form.is_valid():
            raise ValidationError(errors=form_errors(form))
        form.save()

        log_audit_action(request, 'update', "Updated site settings", target_type='site_settings', target_id=1)
        return get_site_config().to_dict()

    patch = put
