"""
Profile Schemas.

This module defines the Pydantic models that describe what the engines read but
never own: the applicant's stored profile and the raw descriptors of the form
fields observed on a page.

Key Models:
    - UserProfile: The applicant profile that form values are resolved from
    - FormField: One input element as reported by the browser extension
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from applyfill.config.validation_constants import PROFILE_ATTRIBUTES


class UserProfile(BaseModel):
    """
    The applicant's stored profile.

    Fields are addressed by the engines through get_attribute() using the
    camelCase attribute vocabulary ("firstName", "zipCode", ...), which is
    also the JSON key format accepted by the API.
    """

    # Identity and contact
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    linked_in_url: Optional[str] = None
    github_url: Optional[str] = None
    portfolio_url: Optional[str] = None

    # Address
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = None

    # Work authorization
    work_authorization: Optional[str] = None
    requires_sponsorship: bool = False
    is_us_citizen: bool = False
    has_work_visa: bool = False
    visa_type: Optional[str] = None

    # Compensation and role
    desired_salary: Optional[str] = None
    desired_job_title: Optional[str] = None
    years_of_experience: Optional[str] = None

    # Education
    highest_degree: Optional[str] = None
    university: Optional[str] = None
    graduation_year: Optional[str] = None
    major: Optional[str] = None

    # EEO
    veteran_status: Optional[str] = None
    disability_status: Optional[str] = None
    gender: Optional[str] = None
    ethnicity: Optional[str] = None

    # Preferences
    available_start_date: Optional[str] = None
    willing_to_relocate: bool = False
    preferred_locations: Optional[str] = None

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "firstName": "Ada",
                "lastName": "Lovelace",
                "email": "ada@example.com",
                "requiresSponsorship": False,
            }
        },
    )

    def get_attribute(self, name: Optional[str]) -> Optional[str]:
        """Resolve a profile attribute to the string that should be typed into a form.

        Boolean attributes resolve to "Yes" or "No".

        Args:
            name: Attribute name from the profile vocabulary (e.g. "linkedInUrl").

        Returns:
            The attribute value, or None for unknown attributes and unset values.
        """
        field_name = PROFILE_ATTRIBUTES.get(name) if name else None
        if field_name is None:
            return None

        value = getattr(self, field_name)
        if isinstance(value, bool):
            return "Yes" if value else "No"
        if value is None:
            return None
        return str(value)


class FormField(BaseModel):
    """
    A raw form-field descriptor.

    Examples:
        {"id": "first_name", "label": "First Name", "type": "text"}
        {"name": "cover_letter", "type": "textarea", "label": "Why do you want to work here?"}
    """

    id: Optional[str] = None
    name: Optional[str] = None
    type: Optional[str] = None
    label: Optional[str] = None
    placeholder: Optional[str] = None

    @property
    def identifier(self) -> Optional[str]:
        """The key used in autofill results: the id when present, else the name."""
        if self.id:
            return self.id
        return self.name or None

    def descriptor_text(self) -> str:
        """Label, name, id and placeholder joined into one lowercase string."""
        parts = [self.label, self.name, self.id, self.placeholder]
        return " ".join((part or "").lower().strip() for part in parts)
