"""Shared schemas and fixtures for formgen tests."""

from datetime import date
import sys
from typing import Literal

from pydantic import BaseModel, EmailStr, Field, HttpUrl
import pytest

from formgen.core.cache import FormInstanceCache
from formgen.core.logging import configure_logging


class Address(BaseModel):
    """Postal address nested in the signup form."""

    street: str = Field(min_length=1)
    city: str
    zip_code: str | None = Field(default=None, pattern=r"^\d{5}$")


class Signup(BaseModel):
    """A signup form touching most field kinds."""

    name: str = Field(min_length=2, max_length=50)
    email: EmailStr
    age: int = Field(ge=18, le=120)
    rating: int = Field(default=3, ge=1, le=5)
    bio: str = Field(default="", min_length=100, description="Tell us about yourself")
    newsletter: bool = False
    role: Literal["admin", "user"] = "user"
    birthday: date | None = None
    website: HttpUrl | None = None
    address: Address
    interests: list[str] = Field(default_factory=list, max_length=3)
    metadata: dict[str, str] = Field(default_factory=dict)
    contact: int | str = 0


class Employment(BaseModel):
    """Company details only apply to employed applicants."""

    employed: bool = False
    company_name: str = Field(min_length=2)
    notes: str | None = None


EMPLOYMENT_RULES = {
    "company_name": {"controllingField": "employed", "equals": True},
}


class FakeClock:
    """Manually advanced time source."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def signup_schema():
    """The signup form schema."""
    return Signup


@pytest.fixture
def address_schema():
    """The nested address schema."""
    return Address


@pytest.fixture
def employment_schema():
    """Schema with a conditionally shown company name."""
    return Employment


@pytest.fixture
def employment_rules():
    """Conditional logic configuration for the employment schema."""
    return dict(EMPLOYMENT_RULES)


@pytest.fixture
def valid_signup():
    """A flat submission that satisfies the signup schema."""
    return {
        "name": "Jane Doe",
        "email": "jane@example.com",
        "age": "34",
        "rating": "4",
        "newsletter": "on",
        "role": "admin",
        "birthday": "1990-05-17",
        "address.street": "1 Main St",
        "address.city": "Springfield",
        "interests[0]": "chess",
        "interests[1]": "go",
        "metadata[0].key": "team",
        "metadata[0].value": "blue",
        "contact": "42",
        "contact:alt": "0",
    }


@pytest.fixture
def clock():
    """Manually advanced clock for cache tests."""
    return FakeClock()


@pytest.fixture
def cache(clock):
    """Form instance cache with a 60 second lifetime."""
    return FormInstanceCache(ttl_seconds=60, clock=clock)


@pytest.fixture(autouse=True, scope="session")
def quiet_logging():
    """Route library logs through stdlib logging at WARNING for the test run."""
    configure_logging(environment="testing", log_level="WARNING", stream=sys.__stderr__)
