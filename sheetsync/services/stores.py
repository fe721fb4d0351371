from typing import Callable, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from sheetsync.database import SessionLocal
from sheetsync.models.sheet import AccessGrant, AccessRight, Sheet, UserAccessSheet
from sheetsync.models.user import User, UserCreate


class _Store:
    """Base for stores that open a short-lived session per query."""

    def __init__(self, session_factory: Callable[[], Session] = SessionLocal):
        self.session_factory = session_factory


class UserStore(_Store):

    def get_by_login(self, login: str) -> Optional[User]:
        with self.session_factory() as db:
            return db.query(User).filter(User.login == login).first()

    def get_by_mail(self, mail: str) -> Optional[User]:
        with self.session_factory() as db:
            return db.query(User).filter(User.mail == mail).first()

    def get_by_id(self, user_id: int) -> Optional[User]:
        with self.session_factory() as db:
            return db.get(User, user_id)

    def get_by_login_or_mail(self, identifier: str) -> Optional[User]:
        with self.session_factory() as db:
            return db.query(User).filter(or_(User.login == identifier, User.mail == identifier)).first()

    def create(self, user: UserCreate) -> User:
        with self.session_factory() as db:
            db_user = User(
                login=user.login,
                mail=user.mail,
                first_name=user.first_name,
                last_name=user.last_name,
                password_hash=user.password,  # hashed by the model validator
            )
            db.add(db_user)
            db.commit()
            db.refresh(db_user)
            return db_user

    def authenticate(self, identifier: str, password: str) -> Optional[User]:
        user = self.get_by_login_or_mail(identifier)
        if user is None or not user.check_password(password):
            return None
        return user


class SheetStore(_Store):

    def get_by_id(self, sheet_id: int) -> Optional[Sheet]:
        with self.session_factory() as db:
            return db.get(Sheet, sheet_id)

    def create(self, title: str, owner_id: int, detail: str = "") -> Sheet:
        """Create a sheet and give `owner_id` the owner right on it."""
        with self.session_factory() as db:
            sheet = Sheet(title=title, detail=detail)
            db.add(sheet)
            db.flush()
            db.add(UserAccessSheet(user_id=owner_id, sheet_id=sheet.id, access_right=AccessRight.OWNER))
            db.commit()
            db.refresh(sheet)
            return sheet


class AccessStore(_Store):

    def get_grant(self, user_id: int, sheet_id: int) -> Optional[AccessGrant]:
        """Return the grant linking the user to the sheet, or None when there is none."""
        with self.session_factory() as db:
            row = db.get(UserAccessSheet, (user_id, sheet_id))
            if row is None:
                return None
            return AccessGrant(user_id=row.user_id, sheet_id=row.sheet_id, access_right=row.access_right)

    # Access Lookup contract used by the socket handshake
    lookup = get_grant

    def grant(self, user_id: int, sheet_id: int, access_right: AccessRight = AccessRight.READER) -> AccessGrant:
        with self.session_factory() as db:
            row = db.get(UserAccessSheet, (user_id, sheet_id))
            if row is None:
                row = UserAccessSheet(user_id=user_id, sheet_id=sheet_id)
                db.add(row)
            row.access_right = access_right
            db.commit()
            return AccessGrant(user_id=user_id, sheet_id=sheet_id, access_right=access_right)
