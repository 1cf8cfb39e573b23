"""Shared fixtures for Form Autopilot tests."""

import pytest

from form_autopilot.core.models import FieldDescriptor, FormContainer, Template, TemplateField


@pytest.fixture
def email_template():
    """Single-field template used by the basic matching scenarios."""
    return Template(
        name="Email only",
        fields=[TemplateField(key="email", label="Email", value="a@b.com", aliases=["email", "e-mail"])]
    )


@pytest.fixture
def profile_template():
    """A typical personal-details template."""
    return Template(
        id="profile",
        name="Profile",
        fields=[
            TemplateField(label="First Name", value="Ada", aliases=["first name", "given name", "fname"]),
            TemplateField(label="Last Name", value="Lovelace", aliases=["last name", "surname", "lname"]),
            TemplateField(label="Email", value="ada@example.com", aliases=["email", "e-mail"]),
            TemplateField(label="Phone", value="", aliases=["phone", "mobile", "telephone"]),
            TemplateField(label="Country", value="United Kingdom", aliases=["country"]),
        ]
    )


@pytest.fixture
def signup_form():
    """A container whose fields mostly match the profile template."""
    return FormContainer(
        selector="#signup",
        fields=[
            FieldDescriptor(name="user_email", placeholder="Your email", type="email", selector="#email"),
            FieldDescriptor(name="tel", label="Telephone", type="tel", selector="#tel"),
            FieldDescriptor(name="country", label="Country", type="select-one", selector="#country"),
            FieldDescriptor(name="coupon", label="Coupon code", selector="#coupon"),
        ]
    )


@pytest.fixture
def search_form():
    """A container with nothing the profile template knows about."""
    return FormContainer(
        selector="#search",
        fields=[FieldDescriptor(name="q", placeholder="Search products", selector="#q")]
    )
