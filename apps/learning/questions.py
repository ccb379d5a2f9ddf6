"""
Single read path for quiz and certificate exam questions.

Learner-facing code only ever calls list_for_learner(), which selects the
question columns without the answer key. list_with_answers() is reserved for
the grading engine and admin views and checks its caller.
"""

from apps.core.exceptions import AuthorizationError

from .models import QuizQuestion, CertificateExamQuestion

LEARNER_FIELDS = ('id', 'question', 'options', 'order_index')

# Capability token held by the grading engine.
GRADER = object()


class QuestionRepository:

    def __init__(self, model, parent_field):
        self.model = model
        self.parent_field = parent_field

    def _for_parent(self, parent):
        return self.model.objects.filter(**{self.parent_field: parent}).order_by('order_index', 'id')

    def list_for_learner(self, parent):
        """Questions without correct_option_index, ready for a JSON response."""
        return list(self._for_parent(parent).values(*LEARNER_FIELDS))

    def count(self, parent):
        return self._for_parent(parent).count()

    def list_with_answers(self, parent, caller):
        """
        Questions including the answer key.

        Args:
            parent: Lesson or CertificateExam
            caller: GRADER, or the requesting user (must be a site admin)

        Raises:
            AuthorizationError: caller may not read the answer key
        """
        if caller is not GRADER and not getattr(caller, 'is_site_admin', False):
            raise AuthorizationError("Only administrators can view answer keys.")
        return list(self._for_parent(parent))


quiz_questions = QuestionRepository(QuizQuestion, 'lesson')
exam_questions = QuestionRepository(CertificateExamQuestion, 'exam')
