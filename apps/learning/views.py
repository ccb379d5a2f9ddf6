"""
Views for the course catalog, lesson player, quizzes and certificate exam.
"""

import logging

from django.db import transaction
from django.db.models import Count, Q
from django.http import HttpResponse
from django.utils import timezone
from django.utils.text import get_valid_filename

from apps.core.api import JsonApiView, get_or_raise
from apps.core.config import get_site_config
from apps.core.exceptions import (
    AuthorizationError, CertificateAlreadyIssued, CourseNotFound, NotFound, ValidationError,
)
from apps.core.permissions import ApiLoginRequiredMixin
from apps.purchasing.models import Purchase
from apps.purchasing.services import purchase_status

from .access import can_open_lesson, has_course_access, lesson_completion
from .certificate_models import Certificate
from .grading import (
    Certified, NotEligible, exam_state_summary, resolve_exam_state,
    submit_exam_answers, submit_quiz_answers,
)
from .models import Course, Lesson, LessonProgress
from .questions import exam_questions, quiz_questions
from .utils import generate_certificate_pdf

logger = logging.getLogger(__name__)


def course_to_dict(course):
    return {
        'id': course.id,
        'title': course.title,
        'short_description': course.short_description,
        'description': course.description,
        'price': course.price,
        'category': course.category,
        'level': course.level,
        'instructor_name': course.instructor_name,
        'duration_hours': course.duration_hours,
        'lessons_count': course.lessons_count,
    }


def lesson_to_dict(lesson, can_open, completed=False):
    return {
        'id': lesson.id,
        'course_id': lesson.course_id,
        'title': lesson.title,
        'description': lesson.description,
        'order_index': lesson.order_index,
        'duration_minutes': lesson.duration_minutes,
        'is_preview': lesson.is_preview,
        'video_id': lesson.video_id if can_open else None,
        'locked': not can_open,
        'completed': completed,
    }


def published_courses():
    return Course.objects.filter(is_published=True)


def published_lessons():
    return Lesson.objects.filter(course__is_published=True).select_related('course')


def get_lesson_or_404(lesson_id):
    return get_or_raise(published_lessons(), NotFound, pk=lesson_id)


# --- Catalog ---

class CourseListView(JsonApiView):
    """
    Catalog of published courses, filterable by category, level and title.
    """
    http_method_names = ['get']

    def get(self, request):
        courses = published_courses()

        category = request.GET.get('category')
        if category:
            courses = courses.filter(category=category)
        level = request.GET.get('level')
        if level:
            courses = courses.filter(level=level)
        query = request.GET.get('q', '').strip()
        if query:
            courses = courses.filter(
                Q(title__icontains=query) | Q(short_description__icontains=query) |
                Q(instructor_name__icontains=query)
            )

        return [course_to_dict(course) for course in courses]


class CourseDetailView(JsonApiView):
    """
    Course page: ordered lessons, the user's purchase status and exam state.
    """
    http_method_names = ['get']

    def get(self, request, course_id):
        course = get_or_raise(published_courses(), CourseNotFound, pk=course_id)
        user = request.user
        access = has_course_access(user, course)

        completed_ids = set()
        if user.is_authenticated:
            completed_ids = set(LessonProgress.objects.filter(
                user=user, lesson__course=course, completed=True
            ).values_list('lesson_id', flat=True))

        data = course_to_dict(course)
        data['lessons'] = [
            lesson_to_dict(lesson, can_open_lesson(user, lesson, access), lesson.id in completed_ids)
            for lesson in course.lessons.order_by('order_index')
        ]
        data['purchase_status'] = purchase_status(user, course)
        data['exam'] = exam_state_summary(resolve_exam_state(user, course)) \
            if user.is_authenticated else None
        return data


# --- Lessons and progress ---

class LessonDetailView(JsonApiView):
    """Lesson with its video reference. Preview lessons are open to everyone."""
    http_method_names = ['get']

    def get(self, request, lesson_id):
        lesson = get_lesson_or_404(lesson_id)
        if not can_open_lesson(request.user, lesson):
            raise AuthorizationError("Purchase this course to watch this lesson.")

        completed = request.user.is_authenticated and LessonProgress.objects.filter(
            user=request.user, lesson=lesson, completed=True
        ).exists()
        return lesson_to_dict(lesson, True, completed)


class LessonProgressView(ApiLoginRequiredMixin, JsonApiView):
    """
    Record that the user watched a lesson. Completion is never undone.
    """
    http_method_names = ['post']

    def post(self, request, lesson_id):
        lesson = get_lesson_or_404(lesson_id)
        if not can_open_lesson(request.user, lesson):
            raise AuthorizationError("Purchase this course to watch this lesson.")

        completed = self.get_json().get('completed', False)
        if not isinstance(completed, bool):
            raise ValidationError("completed must be true or false.")

        with transaction.atomic():
            progress, created = LessonProgress.objects.select_for_update().get_or_create(
                user=request.user,
                lesson=lesson,
                defaults={'course': lesson.course, 'completed': completed}
            )
            if not created:
                progress.completed = progress.completed or completed
                progress.last_watched_at = timezone.now()
                progress.save(update_fields=['completed', 'last_watched_at'])

        completed_lessons, total_lessons = lesson_completion(request.user, lesson.course)
        return {
            'lesson_id': lesson.id,
            'completed': progress.completed,
            'last_watched_at': progress.last_watched_at.isoformat(),
            'completed_lessons': completed_lessons,
            'total_lessons': total_lessons,
        }


class CourseResumeView(ApiLoginRequiredMixin, JsonApiView):
    """The lesson to continue with: last watched, else the first one."""
    http_method_names = ['get']

    def get(self, request, course_id):
        course = get_or_raise(published_courses(), CourseNotFound, pk=course_id)

        last = LessonProgress.objects.filter(user=request.user, lesson__course=course) \
            .select_related('lesson').order_by('-last_watched_at').first()
        lesson = last.lesson if last else course.lessons.order_by('order_index').first()
        if lesson is None:
            raise NotFound("This course has no lessons yet.")

        completed = bool(last and last.lesson_id == lesson.id and last.completed)
        return lesson_to_dict(lesson, can_open_lesson(request.user, lesson), completed)


class DashboardView(ApiLoginRequiredMixin, JsonApiView):
    """The user's purchases with lesson completion per course."""
    http_method_names = ['get']

    def get(self, request):
        user = request.user
        purchases = Purchase.objects.filter(user=user).select_related('course') \
            .annotate(total_lessons=Count('course__lessons', distinct=True))

        completed_counts = dict(
            LessonProgress.objects.filter(user=user, completed=True)
            .values('lesson__course_id').annotate(n=Count('id'))
            .values_list('lesson__course_id', 'n')
        )
        certified = set(Certificate.objects.filter(user=user).values_list('course_id', flat=True))

        return {
            'purchases': [
                {
                    'purchase_id': purchase.id,
                    'status': purchase.status,
                    'purchased_at': purchase.purchased_at.isoformat(),
                    'course': course_to_dict(purchase.course),
                    'completed_lessons': completed_counts.get(purchase.course_id, 0),
                    'total_lessons': purchase.total_lessons,
                    'certified': purchase.course_id in certified,
                }
                for purchase in purchases
            ]
        }


# --- Quizzes ---

class QuizQuestionsView(JsonApiView):
    """Lesson quiz questions without the answer key."""
    http_method_names = ['get']

    def get(self, request, lesson_id):
        lesson = get_lesson_or_404(lesson_id)
        if not can_open_lesson(request.user, lesson):
            raise AuthorizationError("Purchase this course to take the lesson quiz.")
        return quiz_questions.list_for_learner(lesson)


class QuizSubmitView(ApiLoginRequiredMixin, JsonApiView):
    http_method_names = ['post']

    def post(self, request, lesson_id):
        lesson = get_lesson_or_404(lesson_id)
        result = submit_quiz_answers(request.user, lesson, self.get_json().get('answers'))
        return result.to_dict()


# --- Certificate exam ---

class ExamStateView(ApiLoginRequiredMixin, JsonApiView):
    http_method_names = ['get']

    def get(self, request, course_id):
        course = get_or_raise(published_courses(), CourseNotFound, pk=course_id)
        return exam_state_summary(resolve_exam_state(request.user, course))


class ExamQuestionsView(ApiLoginRequiredMixin, JsonApiView):
    """
    Certificate exam questions without the answer key. A certified learner
    gets the existing certificate instead of a new exam.
    """
    http_method_names = ['get']

    def get(self, request, course_id):
        course = get_or_raise(published_courses(), CourseNotFound, pk=course_id)

        state = resolve_exam_state(request.user, course)
        if isinstance(state, Certified):
            raise CertificateAlreadyIssued(certificate=state.certificate.to_dict())
        if isinstance(state, NotEligible):
            raise AuthorizationError(state.message, reason=state.reason)

        if state.exam is None:
            raise NotFound("This course has no certificate exam.")
        questions = exam_questions.list_for_learner(state.exam)
        if not questions:
            raise NotFound("This course has no certificate exam.")
        return questions


class ExamSubmitView(ApiLoginRequiredMixin, JsonApiView):
    http_method_names = ['post']

    def post(self, request, course_id):
        course = get_or_raise(published_courses(), CourseNotFound, pk=course_id)
        data = self.get_json()
        result = submit_exam_answers(request.user, course, data.get('answers'), data.get('recipient_name'))
        return result.to_dict()


class CertificatePdfView(ApiLoginRequiredMixin, JsonApiView):
    """
    Download the issued certificate as a PDF.
    """
    http_method_names = ['get']

    def get(self, request, course_id):
        course = get_or_raise(Course.objects.all(), CourseNotFound, pk=course_id)
        certificate = get_or_raise(
            Certificate.objects.select_related('course'), NotFound,
            user=request.user, course=course
        )

        pdf_buffer = generate_certificate_pdf(certificate, site_name=get_site_config().site_name)

        filename = get_valid_filename(f"certificate-{certificate.recipient_name}")
        response = HttpResponse(pdf_buffer.getvalue(), content_type='application/pdf')
        response['Content-Disposition'] = f'attachment; filename="{filename}.pdf"'
        return response
