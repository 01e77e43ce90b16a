import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from pos_backend.domain.entities import CustomerRecord, NewCustomer
from pos_backend.domain.errors import Conflict
from pos_backend.domain.models import Customer
from pos_backend.infrastructure.database import SessionLocal
from pos_backend.interfaces.ICustomerRepository import ICustomerRepository

logger = logging.getLogger(__name__)


def to_customer_record(row: Customer) -> CustomerRecord:
    return CustomerRecord(
        id=row.id,
        first_name=row.first_name,
        last_name=row.last_name,
        phone=row.phone,
        email=row.email,
        is_member=bool(row.is_member),
    )


class SqlCustomerRepository(ICustomerRepository):

    def __init__(self, session_factory=SessionLocal):
        self.session_factory = session_factory

    def get_customer_by_id(self, customer_id: str) -> Optional[CustomerRecord]:
        session = self.session_factory()
        try:
            row = session.get(Customer, customer_id)
            return to_customer_record(row) if row else None
        finally:
            session.close()

    def get_customer_by_phone(self, phone: str) -> Optional[CustomerRecord]:
        session = self.session_factory()
        try:
            row = session.query(Customer).filter(Customer.phone == phone).one_or_none()
            return to_customer_record(row) if row else None
        finally:
            session.close()

    def create_customer(self, fields: NewCustomer) -> CustomerRecord:
        session = self.session_factory()
        try:
            # Fast path for the common case; the unique index on phone is what
            # actually serializes concurrent registrations.
            exists = session.query(Customer.id).filter(Customer.phone == fields.phone).first()
            if exists:
                raise Conflict("Customer with this phone already exists")

            row = Customer(
                first_name=fields.first_name,
                last_name=fields.last_name,
                phone=fields.phone,
                email=fields.email,
                is_member=fields.is_member,
            )
            session.add(row)
            session.commit()
            return to_customer_record(row)
        except IntegrityError:
            session.rollback()
            logger.info(f"Concurrent registration lost the race for phone {fields.phone}")
            raise Conflict("Customer with this phone already exists") from None
        finally:
            session.close()
