import bcrypt
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from models.user import User
from core.db import insert_on_conflict, store_errors
from core.errors import CredentialError, HashingError, NoEmailError, UserExists
from core.logger import get_logger

_logger = get_logger(__name__)

BCRYPT_ROUNDS = 10
# bcrypt only reads the first 72 bytes of a password
BCRYPT_MAX_BYTES = 72

def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]

def hash_password(password: str) -> str:
    if not isinstance(password, str):
        raise TypeError("password must be a string")
    try:
        salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
        return bcrypt.hashpw(_password_bytes(password), salt).decode("utf-8")
    except ValueError as e:
        raise HashingError() from e

def verify_password(password: str, hashed: str) -> bool:
    # Google-only accounts carry no hash and can never log in with a password
    if not hashed:
        return False
    try:
        return bcrypt.checkpw(_password_bytes(password), hashed.encode("utf-8"))
    except ValueError:
        return False

def get_user_by_email(db: Session, email: str):
    return db.query(User).filter(User.email == email).first()

def get_user_by_id(db: Session, user_id: int):
    with store_errors(db, "fetch a user"):
        return db.get(User, user_id)

def create_user(db: Session, first_name, last_name, email, password, role="user"):
    """Register a local account. Raises UserExists when the email is taken."""
    password_hash = hash_password(password)
    with store_errors(db, "register a user"):
        if get_user_by_email(db, email):
            raise UserExists()
        user = User(first_name=first_name, last_name=last_name, email=email,
                    password_hash=password_hash, role=role)
        db.add(user)
        try:
            db.commit()
        except IntegrityError as e:
            # unique email constraint lost a race with another signup
            db.rollback()
            raise UserExists() from e
    _logger.info(f"Registered user {email}")
    return user

def authenticate_user(db: Session, email, password):
    """Return the user for valid credentials, otherwise raise CredentialError."""
    with store_errors(db, "look up a user"):
        user = get_user_by_email(db, email)
    if not user:
        raise CredentialError("No user found with this email!")
    if not verify_password(password, user.password_hash):
        raise CredentialError("Invalid credentials")
    _logger.info(f"User {email} logged in")
    return user

def resolve_federated_user(db: Session, email: str, display_name: str):
    """
    Find or create the local user behind a Google identity.
    An existing account is returned as stored, without syncing the profile.
    A new one gets the display name, an empty last name and no password.
    """
    if not email:
        raise NoEmailError()

    with store_errors(db, "resolve a Google user"):
        existing = get_user_by_email(db, email)
        if existing:
            return existing

        result = insert_on_conflict(
            db,
            User,
            {"first_name": display_name or "", "last_name": "", "email": email,
             "password_hash": "", "role": "user"},
            conflict_columns=["email"],
        )
        db.commit()
        if result.rowcount:
            _logger.info(f"Created new Google user: {email}")
        # Re-read: a concurrent first login may have inserted the row
        return get_user_by_email(db, email)
