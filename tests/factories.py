"""
Builders for test data shared by the test modules.
"""
import json

from apps.core.models import Role, User
from apps.learning.models import (
    CertificateExam, CertificateExamQuestion, Course, Lesson, LessonProgress, QuizQuestion,
)
from apps.purchasing.models import PromoCode, Purchase

PASSWORD = 'testpass123'


def make_user(email='learner@example.com', full_name='Test Learner', admin=False):
    user = User.objects.create_user(email=email, password=PASSWORD, full_name=full_name)
    if admin:
        role, _ = Role.objects.get_or_create(name=Role.ADMIN)
        user.roles.add(role)
    return user


def make_course(title='Python Basics', price=50000, lessons=0, published=True, **extra):
    course = Course.objects.create(title=title, price=price, is_published=published, **extra)
    if lessons:
        add_lessons(course, lessons)
    return course


def add_lessons(course, count, preview_first=False):
    start = course.lessons.count()
    lessons = [
        Lesson.objects.create(
            course=course,
            title=f"Lesson {start + i + 1}",
            order_index=start + i + 1,
            video_id=f"vid-{start + i + 1}",
            is_preview=preview_first and start + i == 0,
        )
        for i in range(count)
    ]
    course.refresh_lessons_count()
    return lessons


def make_promo(code='SAVE20', discount_percent=20, **extra):
    return PromoCode.objects.create(code=code, discount_percent=discount_percent, **extra)


def grant_access(user, course):
    return Purchase.objects.create(
        user=user, course=course, amount=course.price,
        payment_id='TX-1', status=Purchase.STATUS_COMPLETED,
    )


def complete_all_lessons(user, course):
    for lesson in course.lessons.all():
        LessonProgress.objects.update_or_create(
            user=user, lesson=lesson, defaults={'course': course, 'completed': True}
        )


def make_quiz(lesson, count=10):
    """Questions whose correct answer is always option 0."""
    return [
        QuizQuestion.objects.create(
            lesson=lesson, question=f"Question {i + 1}?",
            options=['right', 'wrong', 'also wrong'], correct_option_index=0, order_index=i,
        )
        for i in range(count)
    ]


def make_exam(course, count=10, passing_score=70):
    exam = CertificateExam.objects.create(course=course, passing_score=passing_score)
    for i in range(count):
        CertificateExamQuestion.objects.create(
            exam=exam, question=f"Exam question {i + 1}?",
            options=['right', 'wrong'], correct_option_index=0, order_index=i,
        )
    return exam


def answers_with(questions, correct):
    """Answer the first `correct` questions right and the rest wrong."""
    return {str(q.id): (0 if i < correct else 1) for i, q in enumerate(questions)}


def post_json(client, url, data=None):
    return client.post(url, data=json.dumps(data or {}), content_type='application/json')


def put_json(client, url, data=None):
    return client.put(url, data=json.dumps(data or {}), content_type='application/json')
