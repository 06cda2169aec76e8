"""Forms for the practice tab."""

from __future__ import annotations

from django import forms


class TaskAnswerForm(forms.Form):
    """Validate a submitted answer for one practice task."""

    task = forms.IntegerField(min_value=0, widget=forms.HiddenInput)
    answer = forms.CharField(
        max_length=500,
        label="Your answer",
        widget=forms.TextInput(attrs={"autocomplete": "off"}),
    )

    def clean_answer(self) -> str:
        """Strip surrounding whitespace and reject blank answers.

        Returns:
            The stripped answer text.
        """

        answer = (self.cleaned_data.get("answer") or "").strip()
        if not answer:
            raise forms.ValidationError("Enter an answer before checking.")
        return answer
