from django import forms
from django.core.exceptions import ValidationError


class WidgetInstanceForm(forms.Form):
    widget_type = forms.ChoiceField(label="Widget type", choices=[])
    area = forms.ChoiceField(label="Area", choices=[])
    order = forms.IntegerField(label="Order", initial=0, min_value=0)
    is_active = forms.BooleanField(label="Active", required=False, initial=True)

    def __init__(self, *args, instance=None, **kwargs):
        super().__init__(*args, **kwargs)
        self.instance = instance

        # Populate widget type choices from registry
        from core.plugins import registry
        self.fields["widget_type"].choices = registry.widget_choices()

        # Populate area choices from the registered widget areas
        from widgets.areas import area_registry
        self.fields["area"].choices = area_registry.choices()

        # Build config fields based on selected widget type (or first available)
        selected_type = None
        if self.data:
            selected_type = self.data.get("widget_type")
        elif instance and instance.widget_type:
            selected_type = instance.widget_type

        if not selected_type and self.fields["widget_type"].choices:
            selected_type = self.fields["widget_type"].choices[0][0]

        self._config_field_keys = []
        if selected_type:
            cls = registry.get_widget_type(selected_type)
            if cls:
                schema_fields = (cls.config_schema or {}).get("fields", {})
                for key, field_def in schema_fields.items():
                    form_key = f"config_{key}"
                    self._config_field_keys.append(key)
                    field_type = field_def.get("type", "string")
                    label = field_def.get("label", key)
                    default = field_def.get("default", "")
                    initial = ""
                    if instance and isinstance(instance.config, dict):
                        initial = instance.config.get(key, default)
                    elif default:
                        initial = default

                    if field_type == "text":
                        self.fields[form_key] = forms.CharField(
                            label=label,
                            required=False,
                            initial=initial,
                            widget=forms.Textarea(attrs={"rows": 5}),
                        )
                    else:
                        self.fields[form_key] = forms.CharField(
                            label=label,
                            required=False,
                            initial=initial,
                        )

        if instance:
            self.fields["widget_type"].initial = instance.widget_type
            self.fields["area"].initial = instance.area
            self.fields["order"].initial = instance.order
            self.fields["is_active"].initial = instance.is_active

    def clean_area(self):
        from widgets.areas import area_registry

        area = self.cleaned_data.get("area")
        if area not in area_registry:
            raise ValidationError(f"'{area}' is not a registered widget area.")
        return area

    def save_instance(self):
        """Save to a WidgetInstance, creating or updating as needed."""
        from widgets.models import WidgetInstance

        config = {}
        for key in self._config_field_keys:
            config[key] = self.cleaned_data.get(f"config_{key}")

        if self.instance and self.instance.pk:
            obj = self.instance
        else:
            obj = WidgetInstance()

        obj.widget_type = self.cleaned_data["widget_type"]
        obj.area = self.cleaned_data["area"]
        obj.order = self.cleaned_data["order"]
        obj.is_active = self.cleaned_data.get("is_active", True)
        obj.config = config
        obj.save()
        return obj
