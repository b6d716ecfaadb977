from crm_estimator import db
from datetime import datetime
from sqlalchemy.orm import relationship


class Customer(db.Model):
    __tablename__ = "customers"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    company_name = db.Column(db.String(255))
    address = db.Column(db.String(255))
    phone = db.Column(db.String(50))
    email = db.Column(db.String(255))
    note = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    contacts = relationship(
        "Contact",
        back_populates="customer",
        cascade="all, delete-orphan",
        order_by="Contact.id",
    )
    opportunities = relationship("Opportunity", back_populates="customer")

    @property
    def display_name(self):
        return self.company_name or self.name or ""

    @property
    def primary_contact(self):
        # primary if flagged, else the first contact on file
        for contact in self.contacts:
            if contact.is_primary:
                return contact
        return self.contacts[0] if self.contacts else None

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "companyName": self.company_name or "",
            "address": self.address or "",
            "phone": self.phone or "",
            "email": self.email or "",
            "note": self.note or "",
        }

    def __repr__(self):
        return f"<Customer {self.name}>"


class Contact(db.Model):
    __tablename__ = "contacts"

    id = db.Column(db.Integer, primary_key=True)
    customer_id = db.Column(db.Integer, db.ForeignKey("customers.id"), nullable=False, index=True)
    first_name = db.Column(db.String(100), nullable=False, default="")
    last_name = db.Column(db.String(100), nullable=False, default="")
    email = db.Column(db.String(255))
    phone = db.Column(db.String(50))
    is_primary = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    customer = relationship("Customer", back_populates="contacts")

    @property
    def full_name(self):
        return f"{self.first_name or ''} {self.last_name or ''}".strip()

    def to_dict(self):
        return {
            "id": self.id,
            "customerId": self.customer_id,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "fullName": self.full_name,
            "email": self.email or "",
            "phone": self.phone or "",
            "isPrimary": bool(self.is_primary),
        }

    def __repr__(self):
        return f"<Contact {self.full_name}>"
