import logging
from typing import Optional

from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from coastwatch.core.security import hash_password
from coastwatch.models.account import Account
from coastwatch.models.profile import Profile
from coastwatch.models.user_role import UserRoleGrant
from coastwatch.models.enums import UserRole

logger = logging.getLogger("coastwatch.accounts")


class AccountExistsError(Exception):
    pass


def create_account(db: Session, *, email: str, password: str, full_name: Optional[str] = None) -> Account:
    """
    Создаёт учётную запись и в той же транзакции профиль и стартовую роль citizen.
    Провижининг выполняется ровно один раз, до первого логина.
    """
    email = email.strip().lower()
    if db.query(Account).filter(Account.email == email).first():
        raise AccountExistsError(email)

    account = Account(email=email, password_hash=hash_password(password), is_active=True)
    db.add(account)
    try:
        db.flush()  # нужен account.id
        db.add(Profile(id=account.id, email=email, full_name=full_name))
        db.add(UserRoleGrant(user_id=account.id, role=UserRole.citizen))
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    db.refresh(account)
    logger.info("account created: %s", account.id)
    return account
