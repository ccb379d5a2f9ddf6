"""
URL configuration for Admin Portal module.
"""

from django.urls import path
from . import views

app_name = 'admin_portal'

urlpatterns = [
    # Payments
    path('purchases', views.PurchaseListView.as_view(), name='purchase_list'),
    path('purchases/<int:pk>', views.PurchaseRejectView.as_view(), name='purchase_reject'),
    path('purchases/<int:pk>/approve', views.PurchaseApproveView.as_view(), name='purchase_approve'),
    path('revenue', views.RevenueView.as_view(), name='revenue'),

    # Promo codes
    path('promo-codes', views.PromoCodeListView.as_view(), name='promo_list'),
    path('promo-codes/<int:pk>', views.PromoCodeDetailView.as_view(), name='promo_detail'),

    # Course content
    path('courses/<int:course_id>/lessons', views.LessonListView.as_view(), name='lesson_list'),
    path('lessons/<int:pk>', views.LessonDetailView.as_view(), name='lesson_detail'),
    path('lessons/<int:pk>/move', views.LessonMoveView.as_view(), name='lesson_move'),
    path('lessons/<int:pk>/quiz-questions', views.QuizQuestionSetView.as_view(), name='quiz_questions'),
    path('courses/<int:course_id>/exam', views.CertificateExamView.as_view(), name='certificate_exam'),

    # Learners and settings
    path('progress', views.LearnerProgressView.as_view(), name='learner_progress'),
    path('settings', views.SiteSettingsView.as_view(), name='settings'),
]
