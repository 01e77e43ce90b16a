import re

from pos_backend.domain.entities import CustomerRecord, NewCustomer
from pos_backend.domain.errors import ValidationError
from pos_backend.interfaces.ICustomerRepository import ICustomerRepository

PHONE_NUMBER_LENGTH = 10
EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def canonical_phone(phone: str) -> str:
    """Digits only, so '98765 43210' and '9876543210' are the same customer."""
    return re.sub(r"\D", "", phone or "")


class CustomerService:
    def __init__(self, customer_repo: ICustomerRepository):
        self.customer_repo = customer_repo

    def find_by_phone(self, phone: str) -> tuple[CustomerRecord | None, bool]:
        if not phone or not phone.strip():
            raise ValidationError("Phone number is required")
        customer = self.customer_repo.get_customer_by_phone(canonical_phone(phone))
        return customer, customer is not None

    def register(
        self,
        first_name: str,
        phone: str,
        last_name: str | None = None,
        email: str | None = None,
        is_member: bool = False,
    ) -> CustomerRecord:
        if not first_name or not first_name.strip() or not phone or not phone.strip():
            raise ValidationError("First name and phone are required")

        digits = canonical_phone(phone)
        if len(digits) != PHONE_NUMBER_LENGTH:
            raise ValidationError(f"Phone number must be {PHONE_NUMBER_LENGTH} digits")

        email = email.strip() if email else None
        if email and not EMAIL_RE.match(email):
            raise ValidationError("Please enter a valid email address")

        return self.customer_repo.create_customer(NewCustomer(
            first_name=first_name.strip(),
            last_name=last_name.strip() if last_name and last_name.strip() else None,
            phone=digits,
            email=email,
            is_member=bool(is_member),
        ))
