from django import forms
from .models import Lesson, CertificateExam


class LessonForm(forms.ModelForm):
    """Lesson fields editable from the admin portal. Ordering is managed separately."""

    class Meta:
        model = Lesson
        fields = ['title', 'description', 'duration_minutes', 'video_id', 'is_preview']

    def clean_title(self):
        title = self.cleaned_data['title'].strip()
        if not title:
            raise forms.ValidationError("Title is required.")
        return title


class QuestionForm(forms.Form):
    """
    One multiple choice question of a quiz or certificate exam.
    Options arrive as a JSON list of strings.
    """
    question = forms.CharField()
    options = forms.JSONField()
    correct_option_index = forms.IntegerField(min_value=0)

    def clean_options(self):
        options = self.cleaned_data['options']
        if not isinstance(options, list) or not all(isinstance(option, str) for option in options):
            raise forms.ValidationError("Options must be a list of strings.")
        options = [option.strip() for option in options]
        if len(options) < 2 or not all(options):
            raise forms.ValidationError("Each question needs at least two non-empty options.")
        return options

    def clean(self):
        cleaned_data = super().clean()
        options = cleaned_data.get('options')
        index = cleaned_data.get('correct_option_index')
        if options is not None and index is not None and index >= len(options):
            self.add_error('correct_option_index', "Correct option index is out of range.")
        return cleaned_data


class CertificateExamForm(forms.ModelForm):
    class Meta:
        model = CertificateExam
        fields = ['passing_score']
