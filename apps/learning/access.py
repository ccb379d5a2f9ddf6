"""
Lesson access and completion checks shared by learner views and grading.
"""

from apps.purchasing.models import Purchase

from .models import LessonProgress


def has_course_access(user, course):
    """A completed purchase is the only thing that unlocks a course."""
    if not user or not user.is_authenticated:
        return False
    return Purchase.objects.filter(
        user=user, course=course, status=Purchase.STATUS_COMPLETED
    ).exists()


def can_open_lesson(user, lesson, course_access=None):
    if lesson.is_preview:
        return True
    if course_access is None:
        course_access = has_course_access(user, lesson.course)
    return course_access


def lesson_completion(user, course):
    """Return (completed_lessons, total_lessons) for the user in this course."""
    total = course.lessons.count()
    completed = LessonProgress.objects.filter(
        user=user, lesson__course=course, completed=True
    ).count()
    return completed, total
