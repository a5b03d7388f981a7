from models import Base
from sqlalchemy import DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import mapped_column, Mapped, relationship


class Token(Base):
    __tablename__ = "token"

    id: Mapped[int] = mapped_column(
        "id", Integer, primary_key=True, index=True, autoincrement=True
    )
    user_id: Mapped[int] = mapped_column(
        "user_id", ForeignKey("user.id", ondelete="CASCADE"), index=True, nullable=False
    )
    token: Mapped[str] = mapped_column("token", String, nullable=False)
    expired_at = mapped_column("expired_at", DateTime(timezone=True), nullable=False)

    # Many to One
    user = relationship("User", back_populates="tokens", foreign_keys=[user_id])
