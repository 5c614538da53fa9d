from django import forms

from .hierarchy import department_choices
from .models import Department


class DepartmentForm(forms.ModelForm):
    parent_department = forms.TypedChoiceField(required=False, coerce=int, empty_value=None, label='Parent department',
                                               widget=forms.Select(attrs={'class': 'form-select'}))

    class Meta:
        model = Department
        fields = ['name', 'parent_department', 'description', 'is_active']
        widgets = {
            'name': forms.TextInput(attrs={'class': 'form-control', 'placeholder': 'e.g. Engineering'}),
            'description': forms.Textarea(attrs={'class': 'form-control', 'rows': 3}),
        }
        error_messages = {
            'name': {'required': 'Department name is required'},
        }

    def __init__(self, *args, **kwargs):
        self.company = kwargs.pop('company')
        super().__init__(*args, **kwargs)
        self.instance.company = self.company

        # Indented tree, without this department's own subtree
        self.fields['parent_department'].choices = [('', 'No parent (top level)')] + department_choices(
            self.company, exclude=self.instance
        )
        if self.instance.parent_department_id:
            self.initial['parent_department'] = self.instance.parent_department_id

    def clean_parent_department(self):
        parent_id = self.cleaned_data.get('parent_department')
        if parent_id is None:
            return None
        try:
            return Department.objects.get(pk=parent_id, company=self.company)
        except Department.DoesNotExist:
            raise forms.ValidationError('Select a valid parent department')
