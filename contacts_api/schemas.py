from typing import Annotated, Literal, Optional

from email_validator import EmailNotValidError, validate_email
from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError
from pydantic_core import PydanticCustomError

from contacts_api import errors, validation

ALLOWED_TLDS = ("com", "net")
INVALID_EMAIL_MESSAGE = "Invalid email format"


def check_email(value: str) -> str:
    """Accept syntactically valid addresses on an allowed top-level domain."""
    try:
        normalized = validate_email(value, check_deliverability=False).normalized
    except EmailNotValidError:
        raise PydanticCustomError("email_format", INVALID_EMAIL_MESSAGE)
    domain = normalized.rsplit("@", 1)[1]
    labels = domain.split(".")
    if len(labels) < 2 or labels[-1].lower() not in ALLOWED_TLDS:
        raise PydanticCustomError("email_format", INVALID_EMAIL_MESSAGE)
    return value


def check_email_format(value: str) -> str:
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        raise PydanticCustomError("email_format", INVALID_EMAIL_MESSAGE)
    return value


Name = Annotated[str, Field(min_length=1, pattern=r"^[A-Za-z]+$")]
Email = Annotated[str, AfterValidator(check_email)]
Password = Annotated[str, Field(min_length=6, max_length=16)]
Subscription = Literal["starter", "pro", "business"]


class RequestBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class ContactBase(RequestBody):
    name: str = Field(min_length=1)
    phone: str = Field(min_length=1)
    email: Optional[str] = None


class ContactCreate(ContactBase):
    pass


class ContactUpdate(ContactBase):
    pass


class FavoriteUpdate(RequestBody):
    favorite: bool


class UserCreate(RequestBody):
    first_name: Name = Field(alias="firstName")
    last_name: Name = Field(alias="lastName")
    email: Email
    password: Password


class UserLogin(RequestBody):
    email: Email
    password: Password


class SubscriptionUpdate(RequestBody):
    subscription: Optional[Subscription] = None


class ProfileUpdate(RequestBody):
    first_name: Name = Field(alias="firstName")
    last_name: Name = Field(alias="lastName")
    email: Email


class EmailRequest(RequestBody):
    email: Annotated[str, AfterValidator(check_email_format)]


class Contact(BaseModel):
    id: int
    name: str
    email: Optional[str] = None
    phone: str
    favorite: bool

    model_config = ConfigDict(from_attributes=True)


class User(BaseModel):
    first_name: str = Field(serialization_alias="firstName")
    last_name: str = Field(serialization_alias="lastName")
    email: str
    subscription: str
    avatar_url: Optional[str] = Field(default=None, serialization_alias="avatarURL")
    verify: bool

    model_config = ConfigDict(from_attributes=True)


class UserResponse(BaseModel):
    user: User


class LoginResponse(BaseModel):
    token: str
    user: User


class SubscriptionView(BaseModel):
    subscription: str

    model_config = ConfigDict(from_attributes=True)


class SubscriptionResponse(BaseModel):
    user: SubscriptionView


class MessageResponse(BaseModel):
    message: str


def parse(schema: type[BaseModel], data: dict) -> BaseModel:
    """Validate ``data`` against ``schema`` or raise a 400 with the first failing field."""
    try:
        return schema.model_validate(data)
    except PydanticValidationError as exc:
        raise errors.ValidationError(validation.first_error_message(exc.errors()))
