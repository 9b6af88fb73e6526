"""Form base class and error reporting shared by the JSON blueprints."""
from flask import jsonify, request
from flask_wtf import FlaskForm
from werkzeug.datastructures import ImmutableMultiDict


def json_formdata(payload) -> ImmutableMultiDict:
    """Flatten a JSON object into form data; every value becomes text, nulls are dropped."""
    if not isinstance(payload, dict):
        return ImmutableMultiDict()
    pairs = []
    for key, value in payload.items():
        values = value if isinstance(value, list) else [value]
        pairs.extend((key, str(item)) for item in values if item is not None)
    return ImmutableMultiDict(pairs)


class ApiForm(FlaskForm):
    """Form bound to a JSON, multipart or form-encoded body; CSRF is handled per blueprint."""

    class Meta:
        csrf = False

    def __init__(self, *args, **kwargs):
        # Numbers in JSON bodies would otherwise reach string validators as ints.
        if not args and "formdata" not in kwargs and request.is_json:
            kwargs["formdata"] = json_formdata(request.get_json(silent=True))
        super().__init__(*args, **kwargs)


def _has_value(field) -> bool:
    return bool(field.raw_data) and str(field.raw_data[0]).strip() != ""


def missing_fields(form: FlaskForm) -> list[str]:
    return [name for name, field in form._fields.items() if field.flags.required and not _has_value(field)]


def form_error_response(form: FlaskForm, message: str, status: int = 400):
    """Answer with ``message`` when required fields are absent, else with the first validator message."""
    missing = missing_fields(form)
    if not missing:
        message = next((errors[0] for errors in form.errors.values() if errors), message)
    return jsonify({"success": False, "message": message, "fields": missing, "errors": form.errors}), status
