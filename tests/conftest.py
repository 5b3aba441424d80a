"""
Shared test fixtures and model declarations for the formtree test suite.
"""

import pytest

from formtree import Binder
from formtree.models import (
    ArrayModel,
    BooleanModel,
    NumberModel,
    ObjectModel,
    StringModel,
    field,
)
from formtree.validation import Email, Required


class AddressModel(ObjectModel):
    street = field(StringModel)
    city = field(StringModel, validators=[Required()])
    country = field(StringModel)


class ContactModel(ObjectModel):
    label = field(StringModel)
    email = field(StringModel, validators=[Email()])


class PersonModel(ObjectModel):
    name = field(StringModel)
    email = field(StringModel, validators=[Email()])
    other_email = field(StringModel)
    age = field(NumberModel)
    subscribed = field(BooleanModel)
    address = field(AddressModel)
    scores = field(ArrayModel, item=NumberModel)
    contacts = field(ArrayModel, item=ContactModel)
    manager = field(lambda: PersonModel, optional=True)


@pytest.fixture
def person_model():
    """The PersonModel class used across binder tests.

    Shape:
        name, email (Email), other_email, age, subscribed,
        address {street, city (Required), country},
        scores [number], contacts [{label, email (Email)}],
        manager (optional, self-referential PersonModel)
    """
    return PersonModel


@pytest.fixture
def binder():
    """A fresh binder over an empty PersonModel value."""
    return Binder(PersonModel)


@pytest.fixture
def person_value():
    """A complete person value with a valid city."""
    return {
        "name": "Jane",
        "email": "jane@example.com",
        "other_email": "jane@example.com",
        "age": 42,
        "subscribed": False,
        "address": {"street": "Main St 1", "city": "Springfield", "country": "US"},
        "scores": [1, 2, 3],
        "contacts": [
            {"label": "work", "email": "jane@work.example"},
            {"label": "home", "email": "jane@home.example"},
        ],
    }
