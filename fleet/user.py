"""User class - a person or a company that can take trips."""

import uuid
from enum import Enum
from typing import Optional

from .guard import not_blank


class UserType(Enum):
    """User variants. Values are the type tags stored in users.json."""

    PERSON = "person"
    COMPANY = "company"

    @property
    def label(self) -> str:
        return "Person" if self is UserType.PERSON else "Company"


class User:
    """A person (first and last name) or a company (company name)."""

    def __init__(
        self,
        user_id: Optional[uuid.UUID],
        user_type: UserType,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        company_name: Optional[str] = None,
    ):
        self.id = user_id if user_id and user_id.int else uuid.uuid4()
        self.type = UserType(user_type)
        self.first_name: Optional[str] = None
        self.last_name: Optional[str] = None
        self.company_name: Optional[str] = None
        if self.type is UserType.PERSON:
            self.first_name = not_blank(first_name, "First name")
            self.last_name = not_blank(last_name, "Last name")
        else:
            self.company_name = not_blank(company_name, "Company name")

    @classmethod
    def person(
        cls, first_name: str, last_name: str, user_id: Optional[uuid.UUID] = None
    ) -> "User":
        return cls(user_id, UserType.PERSON, first_name=first_name, last_name=last_name)

    @classmethod
    def company(cls, name: str, user_id: Optional[uuid.UUID] = None) -> "User":
        return cls(user_id, UserType.COMPANY, company_name=name)

    @property
    def display_name(self) -> str:
        """Human-readable name: "First Last" or the company name."""
        if self.type is UserType.PERSON:
            return f"{self.first_name} {self.last_name}"
        return self.company_name
