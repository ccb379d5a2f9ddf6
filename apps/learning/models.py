"""
Models for the course catalog, lessons, quizzes and certificate exams.
"""

from django.db import models
from django.utils import timezone
from django.core.validators import MinValueValidator, MaxValueValidator
from apps.core.models import User


class Course(models.Model):
    """
    A purchasable course. Instructors and course editing live in the Django admin.
    """
    CATEGORY_CHOICES = [
        ('web', 'Web Development'),
        ('programming', 'Programming'),
        ('ai', 'Artificial Intelligence'),
    ]

    LEVEL_CHOICES = [
        ('beginner', 'Beginner'),
        ('intermediate', 'Intermediate'),
        ('advanced', 'Advanced'),
    ]

    title = models.CharField(max_length=255)
    short_description = models.CharField(max_length=500, blank=True)
    description = models.TextField(blank=True)
    price = models.PositiveIntegerField(default=0, help_text="Price in whole currency units")
    category = models.CharField(max_length=20, choices=CATEGORY_CHOICES, default='programming')
    level = models.CharField(max_length=20, choices=LEVEL_CHOICES, default='beginner')
    instructor_name = models.CharField(max_length=255, blank=True)
    duration_hours = models.PositiveIntegerField(default=0)
    lessons_count = models.PositiveIntegerField(default=0, editable=False)
    is_published = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'lms_courses'
        ordering = ['-created_at']

    def __str__(self):
        return self.title

    def refresh_lessons_count(self):
        """Recalculate the cached lesson count from the lesson table."""
        self.lessons_count = self.lessons.count()
        Course.objects.filter(pk=self.pk).update(lessons_count=self.lessons_count)
        return self.lessons_count


class Lesson(models.Model):
    """
    Individual video lesson. order_index is a dense, course-scoped total order.
    """
    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name='lessons')
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    order_index = models.PositiveIntegerField(default=0)
    duration_minutes = models.PositiveIntegerField(default=10, help_text="Estimated duration")
    video_id = models.CharField(max_length=100, blank=True, help_text="Vimeo video id")
    is_preview = models.BooleanField(default=False, help_text="Watchable without a purchase")

    class Meta:
        db_table = 'lms_lessons'
        ordering = ['order_index']
        unique_together = ['course', 'order_index']

    def __str__(self):
        return self.title


class LessonProgress(models.Model):
    """
    Tracks watching and completion of individual lessons.
    """
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='lesson_progress')
    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name='lesson_progress')
    lesson = models.ForeignKey(Lesson, on_delete=models.CASCADE, related_name='progress')
    completed = models.BooleanField(default=False)
    last_watched_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'lms_lesson_progress'
        unique_together = ['user', 'lesson']
        ordering = ['-last_watched_at']

    def __str__(self):
        return f"{self.user.full_name} - {self.lesson.title} ({'done' if self.completed else 'watching'})"


class QuizQuestion(models.Model):
    """
    Multiple choice question attached to a lesson.
    """
    lesson = models.ForeignKey(Lesson, on_delete=models.CASCADE, related_name='quiz_questions')
    question = models.TextField()
    options = models.JSONField(default=list, help_text="List of options strings")
    correct_option_index = models.PositiveIntegerField(help_text="Index of correct option (0-based)")
    order_index = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = 'lms_quiz_questions'
        ordering = ['order_index', 'id']

    def __str__(self):
        return self.question[:50]


class QuizAttempt(models.Model):
    """
    Latest attempt of a user at a lesson quiz. A passed attempt is never overwritten.
    """
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='quiz_attempts')
    lesson = models.ForeignKey(Lesson, on_delete=models.CASCADE, related_name='quiz_attempts')
    score = models.PositiveIntegerField(default=0)
    total_questions = models.PositiveIntegerField(default=0)
    passed = models.BooleanField(default=False)
    answers = models.JSONField(default=dict, help_text="Map of question id to chosen option index")
    completed_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'lms_quiz_attempts'
        unique_together = ['user', 'lesson']
        ordering = ['-completed_at']

    def __str__(self):
        return f"{self.user.full_name} - {self.lesson.title}: {self.score}/{self.total_questions}"


class CertificateExam(models.Model):
    """
    Final exam of a course. Passing it issues the course certificate.
    """
    course = models.OneToOneField(Course, on_delete=models.CASCADE, related_name='certificate_exam')
    passing_score = models.PositiveIntegerField(
        default=70,
        validators=[MinValueValidator(1), MaxValueValidator(100)],
        help_text="Minimum percentage to pass"
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'lms_certificate_exams'

    def __str__(self):
        return f"Exam - {self.course.title}"


class CertificateExamQuestion(models.Model):
    """
    Question for a certificate exam.
    """
    exam = models.ForeignKey(CertificateExam, on_delete=models.CASCADE, related_name='questions')
    question = models.TextField()
    options = models.JSONField(default=list, help_text="List of options strings")
    correct_option_index = models.PositiveIntegerField(help_text="Index of correct option (0-based)")
    order_index = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = 'lms_certificate_exam_questions'
        ordering = ['order_index', 'id']

    def __str__(self):
        return self.question[:50]


from .certificate_models import Certificate  # noqa: E402,F401
