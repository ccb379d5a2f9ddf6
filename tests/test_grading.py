"""
Test cases for the question read path, quiz grading and the certificate exam.
"""
from unittest import mock

from django.test import TestCase

from apps.core.exceptions import AuthorizationError, NotFound, ValidationError
from apps.learning.grading import (
    Certified, Eligible, NotEligible, quiz_pass_mark, resolve_exam_state,
    submit_exam_answers, submit_quiz_answers,
)
from apps.learning.models import Certificate, QuizAttempt
from apps.learning.questions import GRADER, exam_questions, quiz_questions

from .factories import (
    add_lessons, answers_with, complete_all_lessons, grant_access, make_course,
    make_exam, make_quiz, make_user,
)


class QuestionRepositoryTest(TestCase):

    def setUp(self):
        self.course = make_course(lessons=1)
        self.lesson = self.course.lessons.first()
        make_quiz(self.lesson, count=3)

    def test_learner_path_has_no_answer_key(self):
        questions = quiz_questions.list_for_learner(self.lesson)
        self.assertEqual(len(questions), 3)
        for question in questions:
            self.assertEqual(set(question), {'id', 'question', 'options', 'order_index'})

    def test_answers_for_grader(self):
        questions = quiz_questions.list_with_answers(self.lesson, GRADER)
        self.assertTrue(all(q.correct_option_index == 0 for q in questions))

    def test_answers_for_admin(self):
        admin = make_user(email='admin@example.com', admin=True)
        self.assertEqual(len(quiz_questions.list_with_answers(self.lesson, admin)), 3)

    def test_answers_refused_to_learner(self):
        learner = make_user()
        with self.assertRaises(AuthorizationError):
            quiz_questions.list_with_answers(self.lesson, learner)

    def test_exam_questions_ordered(self):
        exam = make_exam(self.course, count=4)
        questions = exam_questions.list_for_learner(exam)
        self.assertEqual([q['order_index'] for q in questions], [0, 1, 2, 3])


class QuizGradingTest(TestCase):

    def setUp(self):
        self.user = make_user()
        self.course = make_course(lessons=2)
        self.lesson = self.course.lessons.order_by('order_index').first()
        self.questions = make_quiz(self.lesson, count=10)
        grant_access(self.user, self.course)

    def test_pass_mark_is_ceiling_of_seventy_percent(self):
        self.assertEqual(quiz_pass_mark(10), 7)
        self.assertEqual(quiz_pass_mark(3), 3)
        self.assertEqual(quiz_pass_mark(4), 3)

    def test_seven_of_ten_passes(self):
        result = submit_quiz_answers(self.user, self.lesson, answers_with(self.questions, 7))
        self.assertTrue(result.passed)
        self.assertEqual(result.score, 7)
        self.assertEqual(result.percentage, 70)

    def test_six_of_ten_fails(self):
        result = submit_quiz_answers(self.user, self.lesson, answers_with(self.questions, 6))
        self.assertFalse(result.passed)
        attempt = QuizAttempt.objects.get(user=self.user, lesson=self.lesson)
        self.assertEqual(attempt.score, 6)

    def test_same_answers_same_score(self):
        answers = answers_with(self.questions, 5)
        first = submit_quiz_answers(self.user, self.lesson, answers)
        second = submit_quiz_answers(self.user, self.lesson, answers)
        self.assertEqual(first.score, second.score)
        self.assertEqual(QuizAttempt.objects.filter(user=self.user, lesson=self.lesson).count(), 1)

    def test_failed_attempt_overwritten_by_retry(self):
        submit_quiz_answers(self.user, self.lesson, answers_with(self.questions, 3))
        submit_quiz_answers(self.user, self.lesson, answers_with(self.questions, 9))
        attempt = QuizAttempt.objects.get(user=self.user, lesson=self.lesson)
        self.assertTrue(attempt.passed)
        self.assertEqual(attempt.score, 9)

    def test_passed_attempt_never_downgraded(self):
        submit_quiz_answers(self.user, self.lesson, answers_with(self.questions, 8))
        result = submit_quiz_answers(self.user, self.lesson, answers_with(self.questions, 2))

        self.assertTrue(result.passed)
        self.assertTrue(result.already_passed)
        self.assertEqual(result.score, 8)
        attempt = QuizAttempt.objects.get(user=self.user, lesson=self.lesson)
        self.assertEqual(attempt.score, 8)

    def test_grading_does_not_mark_progress(self):
        submit_quiz_answers(self.user, self.lesson, answers_with(self.questions, 10))
        self.assertFalse(self.user.lesson_progress.exists())

    def test_unknown_question_ids_ignored(self):
        answers = answers_with(self.questions, 7)
        answers['999999'] = 0
        self.assertEqual(submit_quiz_answers(self.user, self.lesson, answers).score, 7)

    def test_malformed_answers(self):
        with self.assertRaises(ValidationError):
            submit_quiz_answers(self.user, self.lesson, ['not', 'a', 'map'])
        with self.assertRaises(ValidationError):
            submit_quiz_answers(self.user, self.lesson, {str(self.questions[0].id): 'zero'})

    def test_requires_purchase(self):
        outsider = make_user(email='outsider@example.com')
        with self.assertRaises(AuthorizationError):
            submit_quiz_answers(outsider, self.lesson, answers_with(self.questions, 10))

    def test_lesson_without_quiz(self):
        other = self.course.lessons.order_by('order_index').last()
        with self.assertRaises(NotFound):
            submit_quiz_answers(self.user, other, {})


class ExamStateTest(TestCase):

    def setUp(self):
        self.user = make_user()
        self.course = make_course(lessons=5)

    def test_not_purchased(self):
        state = resolve_exam_state(self.user, self.course)
        self.assertIsInstance(state, NotEligible)
        self.assertEqual(state.reason, 'not_purchased')

    def test_lessons_incomplete(self):
        grant_access(self.user, self.course)
        state = resolve_exam_state(self.user, self.course)
        self.assertIsInstance(state, NotEligible)
        self.assertEqual(state.reason, 'lessons_incomplete')
        self.assertEqual((state.completed_lessons, state.total_lessons), (0, 5))

    def test_pending_purchase_not_eligible(self):
        from apps.purchasing.services import record_purchase
        record_purchase(self.user, self.course, payment_reference='TX-1')
        complete_all_lessons(self.user, self.course)
        self.assertIsInstance(resolve_exam_state(self.user, self.course), NotEligible)

    def test_eligible(self):
        grant_access(self.user, self.course)
        complete_all_lessons(self.user, self.course)
        exam = make_exam(self.course)
        state = resolve_exam_state(self.user, self.course)
        self.assertIsInstance(state, Eligible)
        self.assertEqual(state.exam, exam)

    def test_new_lesson_reopens_requirement(self):
        grant_access(self.user, self.course)
        complete_all_lessons(self.user, self.course)
        add_lessons(self.course, 1)
        self.assertIsInstance(resolve_exam_state(self.user, self.course), NotEligible)

    def test_certified(self):
        Certificate.objects.create(user=self.user, course=self.course, recipient_name='A',
                                   score=8, total_questions=10)
        self.assertIsInstance(resolve_exam_state(self.user, self.course), Certified)


class ExamSubmissionTest(TestCase):

    def setUp(self):
        self.user = make_user()
        self.course = make_course(lessons=5)
        grant_access(self.user, self.course)
        complete_all_lessons(self.user, self.course)
        self.exam = make_exam(self.course, count=10, passing_score=70)
        self.questions = list(self.exam.questions.all())

    def test_pass_issues_certificate(self):
        result = submit_exam_answers(self.user, self.course, answers_with(self.questions, 8), 'Bat-Erdene')

        self.assertTrue(result.passed)
        self.assertEqual((result.score, result.total_questions, result.percentage), (8, 10, 80))
        certificate = Certificate.objects.get(user=self.user, course=self.course)
        self.assertEqual(certificate.score, 8)
        self.assertEqual(certificate.recipient_name, 'Bat-Erdene')

        data = result.to_dict()
        self.assertEqual(data['issued_at'], certificate.issued_at.isoformat())
        self.assertNotIn('passing_score', data)

    def test_fail_persists_nothing(self):
        result = submit_exam_answers(self.user, self.course, answers_with(self.questions, 6), 'Bat-Erdene')

        self.assertFalse(result.passed)
        self.assertEqual(result.percentage, 60)
        self.assertEqual(result.to_dict()['passing_score'], 70)
        self.assertFalse(Certificate.objects.exists())

    def test_resubmission_without_name_returns_existing_certificate(self):
        submit_exam_answers(self.user, self.course, answers_with(self.questions, 8), 'Bat-Erdene')
        result = submit_exam_answers(self.user, self.course, {}, '')

        self.assertTrue(result.already_issued)
        self.assertEqual(result.score, 8)
        self.assertEqual(result.certificate.recipient_name, 'Bat-Erdene')

    def test_resubmission_returns_existing_certificate(self):
        submit_exam_answers(self.user, self.course, answers_with(self.questions, 8), 'Bat-Erdene')
        result = submit_exam_answers(self.user, self.course, answers_with(self.questions, 10), 'Someone Else')

        self.assertTrue(result.already_issued)
        self.assertEqual(result.score, 8)
        self.assertEqual(Certificate.objects.count(), 1)
        self.assertEqual(Certificate.objects.get().recipient_name, 'Bat-Erdene')

    def test_concurrent_issue_returns_existing(self):
        existing = Certificate.objects.create(user=self.user, course=self.course,
                                              recipient_name='First', score=9, total_questions=10)
        eligible = Eligible(self.exam, 5, 5)
        with mock.patch('apps.learning.grading.resolve_exam_state', return_value=eligible):
            result = submit_exam_answers(self.user, self.course, answers_with(self.questions, 8), 'Second')

        self.assertTrue(result.already_issued)
        self.assertEqual(result.certificate.pk, existing.pk)
        self.assertEqual(Certificate.objects.count(), 1)

    def test_percentage_rounding_against_passing_score(self):
        exam_course = make_course(title='Three questions', lessons=1)
        grant_access(self.user, exam_course)
        complete_all_lessons(self.user, exam_course)
        exam = make_exam(exam_course, count=3, passing_score=67)
        # 2/3 is 66.67%, rounded to 67
        result = submit_exam_answers(self.user, exam_course, answers_with(list(exam.questions.all()), 2), 'A')
        self.assertEqual(result.percentage, 67)
        self.assertTrue(result.passed)

    def test_not_eligible(self):
        outsider = make_user(email='outsider@example.com')
        with self.assertRaises(AuthorizationError):
            submit_exam_answers(outsider, self.course, answers_with(self.questions, 10), 'Outsider')

    def test_recipient_name_required(self):
        with self.assertRaises(ValidationError):
            submit_exam_answers(self.user, self.course, answers_with(self.questions, 10), '   ')

    def test_course_without_exam(self):
        course = make_course(title='No exam', lessons=1)
        grant_access(self.user, course)
        complete_all_lessons(self.user, course)
        with self.assertRaises(NotFound):
            submit_exam_answers(self.user, course, {}, 'A')
