from django import forms
from django.core.validators import RegexValidator

from . import conf
from .layout import GridConfig

color_validator = RegexValidator(
    r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$",
    "Enter a hex color such as #F44336.",
)


class ZoneForm(forms.Form):
    # Blank names are rejected by create_zone so the caller gets INVALID_NAME.
    name = forms.CharField(max_length=100, required=False)
    color = forms.CharField(max_length=20, initial="#F44336", validators=[color_validator])


class GridConfigForm(forms.Form):
    rows = forms.IntegerField(min_value=1)
    cols = forms.IntegerField(min_value=1)
    center_lat = forms.FloatField(min_value=-90, max_value=90)
    center_lng = forms.FloatField(min_value=-180, max_value=180)
    cell_width = forms.FloatField(help_text="Degrees of longitude per cell.")
    cell_height = forms.FloatField(help_text="Degrees of latitude per cell.")

    def _clean_dimension(self, name):
        value = self.cleaned_data[name]
        limit = conf.max_grid_dimension()
        if value > limit:
            raise forms.ValidationError(f"The grid cannot exceed {limit} {name}.")
        return value

    def clean_rows(self):
        return self._clean_dimension("rows")

    def clean_cols(self):
        return self._clean_dimension("cols")

    def clean(self):
        cleaned = super().clean()
        for name in ("cell_width", "cell_height"):
            value = cleaned.get(name)
            if value is not None and value <= 0:
                self.add_error(name, "Cell size must be greater than zero.")
        return cleaned

    def grid_config(self) -> GridConfig:
        return GridConfig(**{name: self.cleaned_data[name] for name in self.fields})
