from concurrent.futures import ThreadPoolExecutor

import pytest

from pos_backend.application.customer_service import canonical_phone
from pos_backend.domain.errors import Conflict, ValidationError


def test_register_and_find_by_phone(customer_service):
    created = customer_service.register("Meera", "98765 11111", last_name="Iyer", email="meera@example.com")

    found, is_existing = customer_service.find_by_phone("9876511111")

    assert is_existing is True
    assert found == created
    assert created.phone == "9876511111"
    assert created.is_member is False


def test_unknown_phone_is_not_existing(customer_service):
    assert customer_service.find_by_phone("9000000000") == (None, False)


def test_lookup_is_exact_not_prefix(customer_service):
    assert customer_service.find_by_phone("987654321") == (None, False)


def test_find_requires_phone(customer_service):
    with pytest.raises(ValidationError, match="Phone number is required"):
        customer_service.find_by_phone("  ")


@pytest.mark.parametrize("kwargs, message", [
    ({"first_name": "", "phone": "9000000001"}, "First name and phone are required"),
    ({"first_name": "Kiran", "phone": ""}, "First name and phone are required"),
    ({"first_name": "Kiran", "phone": "12345"}, "10 digits"),
    ({"first_name": "Kiran", "phone": "9000000001", "email": "not-an-email"}, "valid email"),
])
def test_register_validation(customer_service, kwargs, message):
    with pytest.raises(ValidationError, match=message):
        customer_service.register(**kwargs)


def test_duplicate_phone_conflicts(customer_service):
    with pytest.raises(Conflict):
        customer_service.register("Someone", "98765-43210")


def test_concurrent_registration_of_same_phone(customer_service):
    def register(name):
        try:
            return customer_service.register(name, "9555500000")
        except Conflict as e:
            return e

    with ThreadPoolExecutor(max_workers=2) as pool:
        results = list(pool.map(register, ["First", "Second"]))

    assert sum(isinstance(r, Conflict) for r in results) == 1
    assert sum(not isinstance(r, Conflict) for r in results) == 1


def test_member_flag_is_kept(customer_service):
    customer = customer_service.register("Neha", "9111122222", is_member=True)
    assert customer.is_member is True


def test_canonical_phone():
    assert canonical_phone("+91 (98765) 43210") == "919876543210"
    assert canonical_phone(None) == ""
