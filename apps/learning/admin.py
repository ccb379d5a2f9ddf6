from django.contrib import admin
from .models import (Course, Lesson, LessonProgress, QuizQuestion, QuizAttempt,
                     CertificateExam, CertificateExamQuestion, Certificate)


class LessonInline(admin.StackedInline):
    model = Lesson
    extra = 0
    ordering = ('order_index',)


@admin.register(Course)
class CourseAdmin(admin.ModelAdmin):
    list_display = ('title', 'category', 'level', 'price', 'instructor_name', 'lessons_count', 'is_published')
    list_filter = ('category', 'level', 'is_published')
    search_fields = ('title', 'description', 'instructor_name')
    readonly_fields = ('lessons_count', 'created_at', 'updated_at')
    inlines = [LessonInline]

    def save_formset(self, request, form, formset, change):
        super().save_formset(request, form, formset, change)
        form.instance.refresh_lessons_count()


class QuizQuestionInline(admin.StackedInline):
    model = QuizQuestion
    extra = 0


@admin.register(Lesson)
class LessonAdmin(admin.ModelAdmin):
    list_display = ('title', 'course', 'order_index', 'is_preview')
    list_filter = ('course', 'is_preview')
    search_fields = ('title', 'course__title')
    inlines = [QuizQuestionInline]


class CertificateExamQuestionInline(admin.StackedInline):
    model = CertificateExamQuestion
    extra = 0


@admin.register(CertificateExam)
class CertificateExamAdmin(admin.ModelAdmin):
    list_display = ('course', 'passing_score', 'updated_at')
    inlines = [CertificateExamQuestionInline]


@admin.register(LessonProgress)
class LessonProgressAdmin(admin.ModelAdmin):
    list_display = ('user', 'course', 'lesson', 'completed', 'last_watched_at')
    list_filter = ('completed', 'course')
    search_fields = ('user__email', 'course__title')


@admin.register(QuizAttempt)
class QuizAttemptAdmin(admin.ModelAdmin):
    list_display = ('user', 'lesson', 'score', 'total_questions', 'passed', 'completed_at')
    list_filter = ('passed',)
    search_fields = ('user__email', 'lesson__title')
    readonly_fields = ('answers',)


@admin.register(Certificate)
class CertificateAdmin(admin.ModelAdmin):
    list_display = ('certificate_number', 'recipient_name', 'course', 'score', 'total_questions', 'issued_at')
    search_fields = ('certificate_number', 'recipient_name', 'user__email')
    readonly_fields = ('certificate_number', 'issued_at')

    def has_change_permission(self, request, obj=None):
        # Issued certificates are immutable
        return False
