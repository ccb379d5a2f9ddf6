"""
Course content management used by the admin portal: lesson ordering and
question sets.

Lesson order_index values stay dense (1..n) and unique within a course, so
every reorder happens inside one transaction with the course's lessons locked.
"""

import logging

from django.db import transaction
from django.db.models import Max

from apps.core.exceptions import ValidationError
from apps.core.utils import form_errors

from .forms import QuestionForm
from .models import Course, Lesson

logger = logging.getLogger(__name__)


def _lock_course(course_id):
    return Course.objects.select_for_update().get(pk=course_id)


def create_lesson(course, form):
    """Append a lesson at the end of the course."""
    with transaction.atomic():
        course = _lock_course(course.pk)
        last_index = course.lessons.aggregate(last=Max('order_index'))['last'] or 0
        lesson = form.save(commit=False)
        lesson.course = course
        lesson.order_index = last_index + 1
        lesson.save()
        course.refresh_lessons_count()
    return lesson


def delete_lesson(lesson):
    """Delete a lesson and shift the following lessons up one place."""
    with transaction.atomic():
        course = _lock_course(lesson.course_id)
        removed_index = lesson.order_index
        lesson.delete()

        # One row at a time, lowest first, so the unique index never sees a clash
        later = course.lessons.filter(order_index__gt=removed_index).order_by('order_index')
        for following in later:
            Lesson.objects.filter(pk=following.pk).update(order_index=following.order_index - 1)

        course.refresh_lessons_count()
    return course


def move_lesson(lesson, direction):
    """
    Swap a lesson with its neighbour.

    Args:
        lesson: Lesson to move
        direction: 'up' (earlier) or 'down' (later)

    Returns:
        The course's lessons in their new order
    """
    if direction not in ('up', 'down'):
        raise ValidationError("direction must be 'up' or 'down'.")

    with transaction.atomic():
        _lock_course(lesson.course_id)
        lessons = list(
            Lesson.objects.select_for_update().filter(course_id=lesson.course_id).order_by('order_index')
        )
        position = next(i for i, item in enumerate(lessons) if item.pk == lesson.pk)
        neighbour_position = position - 1 if direction == 'up' else position + 1
        if not 0 <= neighbour_position < len(lessons):
            raise ValidationError(f"Lesson is already {'first' if direction == 'up' else 'last'}.")

        current, neighbour = lessons[position], lessons[neighbour_position]
        current_index, neighbour_index = current.order_index, neighbour.order_index

        # Park the moving lesson on a free slot while the neighbour takes its place
        free_slot = lessons[-1].order_index + 1
        Lesson.objects.filter(pk=current.pk).update(order_index=free_slot)
        Lesson.objects.filter(pk=neighbour.pk).update(order_index=current_index)
        Lesson.objects.filter(pk=current.pk).update(order_index=neighbour_index)

    return list(Lesson.objects.filter(course_id=lesson.course_id).order_by('order_index'))


def clean_question_set(questions):
    """
    Validate a full question set.

    Returns:
        List of cleaned dicts (question, options, correct_option_index)

    Raises:
        ValidationError: with per-question field errors keyed by position
    """
    if not isinstance(questions, list):
        raise ValidationError("questions must be a list.")

    cleaned, errors = [], {}
    for position, item in enumerate(questions):
        form = QuestionForm(item if isinstance(item, dict) else {})
        if form.is_valid():
            cleaned.append(form.cleaned_data)
        else:
            errors[str(position)] = form_errors(form)

    if errors:
        raise ValidationError("Some questions are invalid.", errors=errors)
    return cleaned


def replace_questions(repository, parent, questions):
    """Replace every question of a lesson quiz or exam in one transaction."""
    model, parent_field = repository.model, repository.parent_field
    cleaned = clean_question_set(questions)
    with transaction.atomic():
        model.objects.filter(**{parent_field: parent}).delete()
        model.objects.bulk_create([
            model(
                **{parent_field: parent},
                question=data['question'],
                options=data['options'],
                correct_option_index=data['correct_option_index'],
                order_index=position,
            )
            for position, data in enumerate(cleaned)
        ])
    logger.info(f"Replaced {model.__name__} set of {parent_field}={parent.pk} ({len(cleaned)} questions)")
    return len(cleaned)
