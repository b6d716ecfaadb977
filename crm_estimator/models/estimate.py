from crm_estimator import db
from datetime import datetime
from sqlalchemy.orm import relationship


class Estimate(db.Model):
    """
    One saved quote for an opportunity.

    ``data`` and ``travel_data`` hold the serialized sheet; the row is always
    rewritten as a whole, never patched field by field.
    """
    __tablename__ = "estimates"

    id = db.Column(db.Integer, primary_key=True)
    opportunity_id = db.Column(db.Integer, db.ForeignKey("opportunities.id"), nullable=False, index=True)
    data = db.Column(db.Text, nullable=False)
    travel_data = db.Column(db.Text, nullable=True)
    display_number = db.Column(db.String(6), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    opportunity = relationship("Opportunity", back_populates="estimates")

    def to_record(self):
        return {
            "id": self.id,
            "opportunityId": self.opportunity_id,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
            "data": self.data,
            "travelData": self.travel_data,
            "displayNumber": self.display_number,
        }

    def __repr__(self):
        return f"<Estimate id={self.id} opportunity_id={self.opportunity_id} display_number={self.display_number}>"
