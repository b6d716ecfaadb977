from crm_estimator import db
from datetime import datetime
from sqlalchemy.orm import relationship


class Opportunity(db.Model):
    __tablename__ = "opportunities"

    id = db.Column(db.Integer, primary_key=True)
    customer_id = db.Column(db.Integer, db.ForeignKey("customers.id"), nullable=True, index=True)
    description = db.Column(db.Text, nullable=False, default="")
    quote_number = db.Column(db.String(50))
    status = db.Column(db.String(30), nullable=False, default="open")
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    customer = relationship("Customer", back_populates="opportunities")
    estimates = relationship(
        "Estimate",
        back_populates="opportunity",
        cascade="all, delete-orphan",
    )
    letters = relationship(
        "LetterProposal",
        back_populates="opportunity",
        cascade="all, delete-orphan",
    )

    def to_dict(self):
        return {
            "id": self.id,
            "customerId": self.customer_id,
            "description": self.description or "",
            "quoteNumber": self.quote_number or "",
            "status": self.status,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<Opportunity id={self.id} quote_number={self.quote_number}>"
