from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile, status
from sqlalchemy.orm import Session

from contacts_api import auth, crud, models, schemas, security, verification
from contacts_api.avatars import LocalAvatarStorage, get_avatar_storage
from contacts_api.db import get_db
from contacts_api.errors import AuthenticationError, BadRequestError, ConflictError, NotFoundError
from contacts_api.mail import Mailer, get_mailer

router = APIRouter(prefix="/users", tags=["users"])

LOGIN_FAILED_MESSAGE = "Email or password is wrong"


def _user_response(user: models.User) -> schemas.UserResponse:
    return schemas.UserResponse(user=schemas.User.model_validate(user))


@router.post("/signup", response_model=schemas.UserResponse, status_code=status.HTTP_201_CREATED)
def signup(body: schemas.UserCreate, db: Session = Depends(get_db), mailer: Mailer = Depends(get_mailer)):
    """
    Register a new user and send the email verification link.

    The user is removed again if the email cannot be sent, so the signup can be retried.

    :raises ConflictError: If the email is already registered.
    """
    if crud.get_user_by_email(db, body.email):
        raise ConflictError()
    token = verification.generate_verification_token()
    try:
        user = crud.create_user(db, body, verification_token=token)
    except ValueError:
        raise ConflictError()
    try:
        verification.send_verification_email(mailer, user.email, token)
    except Exception:
        crud.delete_user(db, user)
        raise
    return _user_response(user)


@router.post("/login", response_model=schemas.LoginResponse)
def login(body: schemas.UserLogin, response: Response, db: Session = Depends(get_db)):
    """
    Check credentials and open a session.

    Unknown email and wrong password fail with the same message.
    """
    user = crud.get_user_by_email(db, body.email)
    if user is None or not security.verify_password(body.password, user.password):
        raise AuthenticationError(LOGIN_FAILED_MESSAGE)
    token = auth.issue_session(db, user)
    auth.set_session_cookie(response, token)
    return schemas.LoginResponse(token=token, user=schemas.User.model_validate(user))


@router.get("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(db: Session = Depends(get_db), current_user: models.User = Depends(auth.get_current_user)):
    """
    Close the current session and clear the session cookie.

    :param db: Database session.
    :param current_user: Authenticated user.
    :return: Empty 204 response.
    :raises AuthenticationError: If the request carries no valid session.
    """
    auth.revoke_session(db, current_user)
    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    auth.clear_session_cookie(response)
    return response


@router.get("/current", response_model=schemas.UserResponse)
def current(current_user: models.User = Depends(auth.get_current_user)):
    """
    Return the authenticated user.

    :param current_user: Authenticated user.
    :return: The user's public profile.
    :raises AuthenticationError: If the request carries no valid session.
    """
    return _user_response(current_user)


@router.patch("", response_model=schemas.SubscriptionResponse)
def update_subscription(
    body: schemas.SubscriptionUpdate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(auth.get_current_user),
):
    """
    Change the subscription tier of the current user.

    :param body: New tier, one of starter, pro or business.
    :param db: Database session.
    :param current_user: Authenticated user.
    :return: Email and subscription after the change.
    :raises AuthenticationError: If the request carries no valid session.
    """
    if body.subscription is not None:
        crud.update_user(db, current_user, subscription=body.subscription)
    return schemas.SubscriptionResponse(user=schemas.SubscriptionView.model_validate(current_user))


@router.put("/info", response_model=schemas.UserResponse)
def update_profile(
    first_name: Optional[str] = Form(None, alias="firstName"),
    last_name: Optional[str] = Form(None, alias="lastName"),
    email: Optional[str] = Form(None),
    avatar: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    current_user: models.User = Depends(auth.get_current_user),
    mailer: Mailer = Depends(get_mailer),
    storage: LocalAvatarStorage = Depends(get_avatar_storage),
):
    """
    Update name, email and optionally the avatar of the current user.

    Any profile change requires the email to be verified again.
    """
    fields = {"firstName": first_name, "lastName": last_name, "email": email}
    body = schemas.parse(schemas.ProfileUpdate, {k: v for k, v in fields.items() if v is not None})

    if body.email != current_user.email:
        owner = crud.get_user_by_email(db, body.email)
        if owner is not None and owner.id != current_user.id:
            raise ConflictError()

    changes = {"first_name": body.first_name, "last_name": body.last_name, "email": body.email}
    if avatar is not None and avatar.filename:
        changes["avatar_url"] = storage.save(current_user.id, avatar)

    token = verification.require_reverification(current_user)
    try:
        user = crud.update_user(db, current_user, **changes)
    except ValueError:
        if "avatar_url" in changes:
            storage.discard(changes["avatar_url"])
        raise ConflictError()
    verification.send_verification_email(mailer, user.email, token)
    return _user_response(user)


@router.get("/verify/{verification_token}", response_model=schemas.MessageResponse)
def verify_email(verification_token: str, db: Session = Depends(get_db)):
    """
    Mark the owner of ``verification_token`` as verified.

    The token is single use.

    :param verification_token: Token from the verification link.
    :param db: Database session.
    :return: Success message.
    :raises BadRequestError: If no user holds the token.
    """
    user = crud.get_user_by_verification_token(db, verification_token)
    if user is None:
        raise BadRequestError("Verification token is invalid")
    verification.confirm_email(user)
    crud.update_user(db, user)
    return {"message": "Verification successful"}


@router.post("/verify", response_model=schemas.MessageResponse)
def resend_verification(
    body: schemas.EmailRequest,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(auth.get_current_user),
    mailer: Mailer = Depends(get_mailer),
):
    """
    Send the verification link again.

    :param body: Email of the user to re-send to.
    :param db: Database session.
    :param current_user: Authenticated user.
    :param mailer: Mail service.
    :return: Confirmation message.
    :raises NotFoundError: If no user has that email.
    :raises BadRequestError: If the user is already verified.
    """
    user = crud.get_user_by_email(db, body.email)
    if user is None:
        raise NotFoundError("User not found")
    if user.verify:
        raise BadRequestError("Verification has already been passed")
    verification.send_verification_email(mailer, user.email, user.verification_token)
    return {"message": "Verification email sent"}
