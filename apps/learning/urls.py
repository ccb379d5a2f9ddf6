"""
URL configuration for the catalog, lessons, quizzes and certificate exam.
"""

from django.urls import path
from . import views

app_name = 'learning'

urlpatterns = [
    # Catalog
    path('courses', views.CourseListView.as_view(), name='catalog'),
    path('courses/<int:course_id>', views.CourseDetailView.as_view(), name='course_detail'),
    path('courses/<int:course_id>/resume', views.CourseResumeView.as_view(), name='course_resume'),
    path('dashboard', views.DashboardView.as_view(), name='dashboard'),

    # Lessons
    path('lessons/<int:lesson_id>', views.LessonDetailView.as_view(), name='lesson'),
    path('lessons/<int:lesson_id>/progress', views.LessonProgressView.as_view(), name='lesson_progress'),
    path('lessons/<int:lesson_id>/quiz-questions', views.QuizQuestionsView.as_view(), name='quiz_questions'),
    path('lessons/<int:lesson_id>/quiz-submit', views.QuizSubmitView.as_view(), name='quiz_submit'),

    # Certificate exam
    path('courses/<int:course_id>/exam', views.ExamStateView.as_view(), name='exam_state'),
    path('courses/<int:course_id>/exam-questions', views.ExamQuestionsView.as_view(), name='exam_questions'),
    path('courses/<int:course_id>/exam-submit', views.ExamSubmitView.as_view(), name='exam_submit'),
    path('courses/<int:course_id>/certificate.pdf', views.CertificatePdfView.as_view(), name='certificate_pdf'),
]
