from crm_estimator import db
from datetime import datetime
from sqlalchemy.orm import relationship


class LetterProposal(db.Model):
    __tablename__ = "letter_proposals"

    id = db.Column(db.Integer, primary_key=True)
    opportunity_id = db.Column(db.Integer, db.ForeignKey("opportunities.id"), nullable=False, index=True)
    estimate_id = db.Column(db.Integer, db.ForeignKey("estimates.id"), nullable=True)
    html = db.Column(db.Text, nullable=False)
    quote_number = db.Column(db.String(50), nullable=True)
    neta_standard = db.Column(db.String(20), nullable=True)
    data = db.Column(db.Text, nullable=True)  # totals snapshot (JSON)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    opportunity = relationship("Opportunity", back_populates="letters")

    def to_dict(self):
        return {
            "id": self.id,
            "opportunityId": self.opportunity_id,
            "estimateId": self.estimate_id,
            "html": self.html,
            "quoteNumber": self.quote_number,
            "netaStandardChoice": self.neta_standard,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<LetterProposal id={self.id} quote_number={self.quote_number}>"
