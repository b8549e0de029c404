from decimal import Decimal

from flask_wtf import FlaskForm
from wtforms import (
    DecimalField as WTFormsDecimalField,
    Form,
    HiddenField,
    PasswordField,
    RadioField,
    SelectField,
    StringField,
    SubmitField,
)
from wtforms.validators import DataRequired, Email, Length, ValidationError

from invoice_dashboard.models import INVOICE_STATUSES
from invoice_dashboard.utils.numeric import (
    MAX_AMOUNT_IN_CENTS,
    coerce_decimal,
    from_minor_units,
)

SELLER_REQUIRED_MESSAGE = "Please select a seller."
AMOUNT_MESSAGE = "Please enter an amount greater than $0."
STATUS_MESSAGE = "Please select an invoice status."

# Largest amount the integer cents column holds on every supported backend
MAX_AMOUNT = from_minor_units(MAX_AMOUNT_IN_CENTS)

STATUS_CHOICES = [(status, status.capitalize()) for status in INVOICE_STATUSES]


class AmountField(WTFormsDecimalField):
    """Decimal field that accepts formatted monetary input.

    Values such as ``"$1,234.50"`` are normalised before parsing.  Input that
    cannot be read as a finite number leaves ``data`` as ``None`` rather than
    recording a parse error, so the field's own validators decide the
    message shown to the user.
    """

    def __init__(self, *args, render_kw=None, **kwargs):
        render_kw = dict(render_kw or {})
        render_kw.setdefault("inputmode", "decimal")
        super().__init__(*args, render_kw=render_kw, **kwargs)

    def process_formdata(self, valuelist):
        if not valuelist:
            return
        self.data = coerce_decimal(valuelist[0])


class AmountRange:
    """Require ``minimum < value <= maximum`` for a numeric field."""

    def __init__(self, minimum, maximum, message=None):
        self.minimum = Decimal(minimum)
        self.maximum = Decimal(maximum)
        self.message = message

    def __call__(self, form, field):
        if (
            field.data is None
            or field.data <= self.minimum
            or field.data > self.maximum
        ):
            raise ValidationError(
                self.message
                or f"Must be greater than {self.minimum} and at most {self.maximum}."
            )


class StatusChoice:
    """Accept only the known invoice statuses."""

    def __init__(self, message=None):
        self.message = message

    def __call__(self, form, field):
        if field.data not in INVOICE_STATUSES:
            raise ValidationError(self.message or "Not a valid choice.")


class InvoiceSchema(Form):
    """Field rules shared by invoice creation and updates.

    This is a plain WTForms form so it validates any mapping of submitted
    values; CSRF is enforced globally by ``CSRFProtect``.  Each field runs
    its own validators, so every invalid field reports its message.
    """

    seller_id = SelectField(
        "Seller",
        validate_choice=False,
        validators=[DataRequired(message=SELLER_REQUIRED_MESSAGE)],
    )
    amount = AmountField(
        "Amount",
        places=2,
        validators=[AmountRange(0, MAX_AMOUNT, message=AMOUNT_MESSAGE)],
    )
    status = RadioField(
        "Invoice status",
        choices=STATUS_CHOICES,
        validate_choice=False,
        validators=[StatusChoice(message=STATUS_MESSAGE)],
    )

    def __init__(self, *args, seller_choices=None, **kwargs):
        super().__init__(*args, **kwargs)
        self.seller_id.choices = [("", "Select a seller")] + list(
            seller_choices or []
        )


class CredentialsSchema(Form):
    """Shape check applied to sign-in credentials before any lookup."""

    email = StringField("Email", validators=[DataRequired(), Email()])
    password = PasswordField("Password", validators=[DataRequired(), Length(min=6)])


class LoginForm(FlaskForm):
    email = StringField("Email", validators=[DataRequired(), Email()])
    password = PasswordField("Password", validators=[DataRequired()])
    next = HiddenField()
    submit = SubmitField("Log in")


class DeleteForm(FlaskForm):
    """Simple form used for CSRF protection on delete actions."""

    submit = SubmitField("Delete")
