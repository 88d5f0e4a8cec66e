"""OTP repository for data access operations."""

from sqlmodel import Session, col, select

from src.auth_core.entities.core.otp.entity import Otp, OtpType
from src.auth_core.entities.core.otp.table import OtpTable


class OtpRepository:
    """Data-access layer for one-time passwords."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def create(self, otp: Otp) -> Otp:
        row = OtpTable.model_validate(otp, from_attributes=True)
        self._session.add(row)
        self._session.flush()
        return Otp.model_validate(row, from_attributes=True)

    def get_latest(self, user_id: str, otp_type: OtpType) -> Otp | None:
        statement = (
            select(OtpTable)
            .where((OtpTable.user_id == user_id) & (OtpTable.type == otp_type))
            .order_by(col(OtpTable.created_at).desc())
        )
        row = self._session.exec(statement).first()
        if row is None:
            return None
        return Otp.model_validate(row, from_attributes=True)

    def delete_for_user(self, user_id: str, otp_type: OtpType) -> int:
        statement = select(OtpTable).where(
            (OtpTable.user_id == user_id) & (OtpTable.type == otp_type)
        )
        rows = self._session.exec(statement).all()
        for row in rows:
            self._session.delete(row)
        self._session.flush()
        return len(rows)
